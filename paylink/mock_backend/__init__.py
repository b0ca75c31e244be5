"""Mock payment-link backend for local development and integration tests"""
