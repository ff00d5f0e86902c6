"""
Vendor Trust Engine - FastAPI Application

Main entry point for the vendor trust backend.

Architecture:
- VendorProfileDB → ProfileStore → VendorTrustProfile (snapshot)
- VendorTrustProfile → estimate_breakdown / classify_profile (display)
- VendorTrustProfile → generate_recovery_goals → ProfileStore (recovery)
- update_vendor_trust_score() (database) → authoritative score and tier
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import auth_router, trust_router, admin_router
from .database import init_db


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup."""
    init_db()
    yield

# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Vendor Trust Engine",
    description="""
    Vendor Trust & Reputation Engine

    Turns vendor activity signals into a trust score, a named tier,
    verification eligibility, and a recovery program vendors can complete
    to rebuild standing after a drop.

    ## Key Principles
    - The stored profile is the single source of truth
    - The score breakdown is an estimate and is never written back
    - Goal lists are replaced wholesale, never patched
    - Every profile write is a compare-and-swap on the profile version
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(trust_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Vendor Trust Engine",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# For running with: python -m vendor_trust.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
