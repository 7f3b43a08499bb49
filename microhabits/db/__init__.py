"""Database layer: connection pool and queries"""
