#!/usr/bin/env python3
"""
Startup script for the Aides Simulator
"""
import subprocess
import sys
from pathlib import Path


def create_env_file():
    """Create .env file if it doesn't exist"""
    env_path = Path(".env")
    if not env_path.exists():
        print("📝 Creating .env file...")

        env_content = """# MongoDB Configuration
MONGODB_URL=mongodb://localhost:27017
MONGODB_DB_NAME=aides_db

# OpenRouter API Configuration (leave empty to use the keyword fallback only)
OPENROUTER_API_KEY=
OPENROUTER_BASE_URL=https://openrouter.ai/api/v1
OPENROUTER_MODEL=openai/gpt-4o-mini
LLM_TIMEOUT_SECONDS=8

# Relevance cache
RELEVANCE_CACHE_TTL_SECONDS=900

# Application Configuration
APP_NAME=Aides Simulator
DEBUG=true
LOG_LEVEL=INFO

# API Configuration
API_PREFIX=/api/v1
CORS_ORIGINS=http://localhost:3000,http://localhost:5173
"""

        with open(env_path, 'w') as f:
            f.write(env_content)

        print("✅ .env file created successfully!")
        print("⚠️  Add an OpenRouter API key to .env to enable the LLM classifier")
    else:
        print("✅ .env file already exists")


def check_dependencies():
    """Check if required dependencies are installed"""
    print("🔍 Checking dependencies...")

    try:
        import fastapi  # noqa: F401
        import uvicorn  # noqa: F401
        import motor  # noqa: F401
        import httpx  # noqa: F401
        import pydantic_settings  # noqa: F401
        print("✅ All Python dependencies are installed")
        return True
    except ImportError as e:
        print(f"❌ Missing dependency: {e}")
        print("📦 Please install dependencies using: pip install -e .")
        return False


def load_catalog(path: str):
    """Load a knowledge base file into MongoDB"""
    print(f"📚 Loading catalog from {path}...")
    result = subprocess.run([sys.executable, '-m', 'app.catalog_loader', path])
    if result.returncode == 0:
        print("✅ Catalog loaded")
    else:
        print("❌ Catalog load failed")


def start_application():
    """Start the FastAPI application"""
    print("🚀 Starting the application...")

    try:
        subprocess.run([
            sys.executable, '-m', 'uvicorn',
            'app.main:app',
            '--host', '0.0.0.0',
            '--port', '8000',
            '--reload'
        ])
    except KeyboardInterrupt:
        print("\n👋 Application stopped by user")


def main():
    """Main startup function"""
    print("🇫🇷  Aides Simulator")
    print("=" * 50)

    if not Path("app").exists():
        print("❌ Please run this script from the project root directory")
        sys.exit(1)

    create_env_file()

    if not check_dependencies():
        sys.exit(1)

    knowledge_base = Path("knowledge_base/data.json")
    if knowledge_base.exists():
        load_catalog(str(knowledge_base))
    else:
        print(f"⚠️  {knowledge_base} not found, skipping catalog load")

    print("\n📚 Visit http://localhost:8000/docs for API documentation")
    start_application()


if __name__ == "__main__":
    main()
