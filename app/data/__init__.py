"""
Data layer: Flask-SQLAlchemy models backing the persistence collaborator.
"""
