"""Public HTTP API for the upload gateway."""
