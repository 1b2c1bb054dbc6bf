"""
Ingestion of provider listings.

- adapters/: Source adapters (Ticketmaster Discovery API)
- normalization/: Raw record -> Event mapping, validators, currency parsing
- pipeline.py: Search request -> provider query -> normalized results
- geocoding.py: Forward/reverse geocoding clients
- deduplication.py: Event deduplication by id
- errors.py: SourceError and provider error translation
"""
