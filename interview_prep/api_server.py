#!/usr/bin/env python3
"""
API server entry point for InterviewPrep.

Starts the FastAPI app with uvicorn after loading variables from a local .env file.
"""

import argparse

import uvicorn
from dotenv import load_dotenv


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="InterviewPrep API Server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind the server to (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8080, help="Port to bind the server to (default: 8080)")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level (default: info)",
    )

    args = parser.parse_args()

    print(f"Starting InterviewPrep API server on {args.host}:{args.port}")
    print(f"API Documentation: http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "interview_prep.api.main:app", host=args.host, port=args.port, reload=args.reload, log_level=args.log_level
    )


if __name__ == "__main__":
    main()
