"""
Services package for caixa: parsing, ingestion, categorization, store and aggregates
"""
