from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError
import logging
import os

from group_polls.db.database import engine, Base
from group_polls.api.v1.endpoints import users, auth, groups, polls

from group_polls.core.exception import (
    DomainError,
    validation_exception_handler,
    http_exception_handler,
    domain_exception_handler,
    database_exception_handler,
    general_exception_handler
)
from group_polls.core.constants import APIConfig, LoggingConfig

# Import models to register them with SQLAlchemy
from group_polls.models import user, group, polls as poll_models

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", LoggingConfig.DEFAULT_LOG_LEVEL).upper(),
    format=LoggingConfig.LOG_FORMAT,
    datefmt=LoggingConfig.DATE_FORMAT
)
logging.getLogger("sqlalchemy.engine").setLevel(LoggingConfig.DATABASE_LOG_LEVEL)

# Create all tables in the database
Base.metadata.create_all(bind=engine)

# Create FastAPI app with centralized configuration
app = FastAPI(
    title=APIConfig.API_TITLE,
    description=APIConfig.API_DESCRIPTION,
    version=APIConfig.API_VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=APIConfig.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=APIConfig.ALLOWED_METHODS,
    allow_headers=["*"],
)

# Register exception handlers
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(DomainError, domain_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# Include routers with centralized prefix
app.include_router(auth.router, prefix=APIConfig.API_V1_PREFIX)
app.include_router(users.router, prefix=APIConfig.API_V1_PREFIX)
app.include_router(groups.router, prefix=APIConfig.API_V1_PREFIX)
app.include_router(polls.router, prefix=APIConfig.API_V1_PREFIX)


@app.get("/")
def read_root():
    return {"message": "Welcome to the Group Polls API!"}
