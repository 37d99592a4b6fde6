"""Main entry point for the Stoic Agent."""

import os

import uvicorn
from dotenv import load_dotenv

from stoic_agent import Agent, load_config
from stoic_agent.api import create_fastapi_app
from stoic_agent.logging_config import setup_logging


def main():
    """Run the agent behind its control API."""
    load_dotenv()

    # Fails fast on invalid thresholds/intervals
    config = load_config()
    setup_logging(log_level=config.log_level)

    api_host = os.getenv("API_HOST", "localhost")
    api_port = int(os.getenv("API_PORT", "8000"))

    app = create_fastapi_app(Agent(config))

    # Run with uvicorn; its loggers go through our JSON handlers
    uvicorn.run(
        app,
        host=api_host,
        port=api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
