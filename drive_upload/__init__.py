"""
Drive Upload Application Package

This package contains the modules behind the video upload gateway:
- api: FastAPI application and the upload-session route
- services.google: OAuth token exchange and Google Drive REST helpers
- services.uploads: request validation, naming and orchestration
- tests: Test suites
"""
