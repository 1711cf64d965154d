"""Vercel serverless function for tabulating runoff results."""

import json
import logging
import sys
from pathlib import Path
from urllib.parse import urlparse

import httpx

# Add the project root to the path so we can import gotm modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from gotm import config
from gotm.cache import ResultsCache
from gotm.analyze import (
    AnalysisError,
    analyze_election_file,
    calculate_voting_results,
    result_to_dict,
)
from gotm.parsers.base import ExportFormatError
from gotm.parsers.json_export import election_from_dict

config.configure_logging()
logger = logging.getLogger(__name__)

# URL exports are cached whole, every category at once
ALL_CATEGORIES = "all"
results_cache = ResultsCache()


def handler(request):
    """Handle incoming requests to tabulate a ballot export.

    Accepts:
    - POST with JSON body: {"candidates": [...], "ballots": [...]} (inline export)
    - POST with JSON body: {"url": "https://..."} (export fetched from the URL)
      add "refresh": true to drop a cached result for that URL
    - POST with multipart form: file upload with 'file' field and optional 'filename' field

    Returns JSON with the runoff result for every registered voting system.
    """
    # Handle CORS preflight
    if request.method == "OPTIONS":
        return create_response(
            "",
            status=204,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": "POST, OPTIONS",
                "Access-Control-Allow-Headers": "Content-Type",
            },
        )

    if request.method != "POST":
        return create_response(
            {"error": "Method not allowed. Use POST."},
            status=405,
        )

    try:
        content_type = request.headers.get("content-type", "")

        if "application/json" in content_type:
            body = request.body.decode("utf-8")
            data = json.loads(body)

            if isinstance(data, dict) and "ballots" in data:
                return create_response(tabulate_inline(data))

            url = data.get("url") if isinstance(data, dict) else None
            if not url:
                return create_response(
                    {"error": "Request body needs 'url' or 'candidates' and 'ballots'"},
                    status=400,
                )

            if data.get("refresh"):
                results_cache.invalidate(url, ALL_CATEGORIES)
            return create_response(results_for_url(url))

        elif "multipart/form-data" in content_type:
            # File upload
            # Note: Vercel's request object handles multipart parsing
            file_data = request.files.get("file")
            if not file_data:
                return create_response(
                    {"error": "Missing 'file' in form data"},
                    status=400,
                )

            filename = request.form.get("filename", file_data.filename or "upload")
            source = filename
            content = file_data.read()

        else:
            return create_response(
                {"error": f"Unsupported content type: {content_type}"},
                status=400,
            )

        result = analyze_election_file(source, content)

        return create_response(result.to_dict())

    except AnalysisError as e:
        return create_response(
            {"error": str(e)},
            status=400,
        )
    except json.JSONDecodeError as e:
        return create_response(
            {"error": f"Invalid JSON: {e}"},
            status=400,
        )
    except Exception as e:
        logger.exception("Unhandled error tabulating results")
        return create_response(
            {"error": f"Internal error: {e}"},
            status=500,
        )


def tabulate_inline(data: dict) -> dict:
    """Tabulate an export document sent directly in the request body."""
    try:
        election = election_from_dict(data, default_name="inline")
    except ExportFormatError as e:
        raise AnalysisError(f"Failed to parse ballot export: {e}") from e

    result = calculate_voting_results(election.candidates, election.ballots)
    return {
        "election_name": election.name,
        "category": election.category,
        "num_candidates": election.num_candidates,
        "num_ballots": election.num_ballots,
        "results": [result_to_dict(result)],
    }


def results_for_url(url: str) -> dict:
    """Fetch and tabulate an export, reusing recent results for the same URL."""

    def compute():
        source, content = fetch_url(url)
        return analyze_election_file(source, content).to_dict()

    return results_cache.get_or_compute(url, ALL_CATEGORIES, compute)


def fetch_url(url: str) -> tuple[str, bytes]:
    """Fetch content from a URL.

    Returns (source_identifier, content_bytes).
    """
    # Validate URL
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise AnalysisError(f"Invalid URL scheme: {parsed.scheme}")

    try:
        with httpx.Client(follow_redirects=True, timeout=config.FETCH_TIMEOUT_SECONDS) as client:
            response = client.get(url)
            response.raise_for_status()
            return url, response.content
    except httpx.HTTPStatusError as e:
        raise AnalysisError(f"HTTP error fetching URL: {e.response.status_code}")
    except httpx.RequestError as e:
        raise AnalysisError(f"Error fetching URL: {e}")


def create_response(body, status: int = 200, headers: dict = None):
    """Create a response object for Vercel."""
    response_headers = {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": "*",
    }
    if headers:
        response_headers.update(headers)

    if isinstance(body, dict):
        body = json.dumps(body)

    # Return in format expected by Vercel Python runtime
    return {
        "statusCode": status,
        "headers": response_headers,
        "body": body,
    }
