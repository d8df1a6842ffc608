"""
TaskHub API - FastAPI application exposing TaskHub over HTTP and WebSocket
"""
