"""HTTP API: FastAPI app, routes and request/response models"""
