"""Presentation layer: FastAPI routers"""
