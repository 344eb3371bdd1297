"""
Aire Pipeline — CDMX hourly air-quality extraction.

Components:
    - ingestion: network connector and pollutant code translation
    - extraction: HTML table extractor and observation records
    - aggregation: per-station grouping and hourly cross-station averages
    - classification: concentration → health category breakpoints
"""
