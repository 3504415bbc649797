"""FastAPI backend for the data chat service.

Architecture:
- API routes: question, dataset and session endpoints
- Services: question service, response cache, session store
- Models: Pydantic schemas (API contracts)
- Dependencies: process-wide singletons built from config
"""
