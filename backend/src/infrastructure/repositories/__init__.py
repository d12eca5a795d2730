"""SQLAlchemy repositories"""
