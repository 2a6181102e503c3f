"""Admin API package"""
