"""
Portfolio and blog site.

This package provides a FastAPI application that renders the About, Work
and Blog pages from content kept in a record store, with attachment
references resolved against object storage.
"""
