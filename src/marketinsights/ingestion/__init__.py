"""Market API ingestion (Polymarket Gamma)."""
