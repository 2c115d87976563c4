#!/usr/bin/env python3
"""
ShortsBot Manual Smoke Test Script.

This script performs a basic end-to-end smoke test of the ShortsBot API by:
1. Checking API health and which integrations are configured
2. Previewing trend topics for the keywords
3. Submitting a background pipeline job
4. Polling the job until it reaches a terminal state
5. Printing results summary

PREREQUISITES:
- ShortsBot API must be running at http://localhost:4000
- No API keys are required: missing integrations fall back to manual
  topics, placeholder images and a stub upload

RUNNING THIS SCRIPT:
    # From the repository root, with the package installed:
    python scripts/manual_smoke_run.py

OPTIONAL ARGUMENTS:
    --base-url   API base URL (default: http://localhost:4000)
    --keywords   Comma-separated keywords (default: server defaults)
    --character  Avatar preset id (shortsbot, vtuber, 3d, comic)
    --timeout    Max seconds to wait for the job (default: 120)
    --verbose    Enable verbose output

EXAMPLE:
    python scripts/manual_smoke_run.py --keywords "ai news,gadgets" --verbose
"""

import argparse
import sys
import time
from dataclasses import dataclass, field
from typing import Any

import httpx

TERMINAL_STATUSES = {"done", "failed", "cancelled"}


@dataclass
class SmokeTestConfig:
    """Configuration for smoke test."""

    base_url: str = "http://localhost:4000"
    keywords: list[str] = field(default_factory=list)
    character_hint: str | None = None
    timeout_seconds: int = 120
    poll_interval_seconds: float = 1.0
    verbose: bool = False


class SmokeTestRunner:
    """Runs the ShortsBot smoke test."""

    def __init__(self, config: SmokeTestConfig):
        self.config = config
        self.api_url = f"{config.base_url}/api/v1"
        self.client = httpx.Client(base_url=self.api_url, timeout=30)
        self.job_id: str | None = None

    def log(self, message: str, verbose_only: bool = False) -> None:
        """Print log message."""
        if verbose_only and not self.config.verbose:
            return
        print(message)

    def request(
        self,
        method: str,
        endpoint: str,
        json: dict | None = None,
        params: dict | None = None,
    ) -> dict[str, Any]:
        """Make API request and return JSON response."""
        self.log(f"  -> {method} {endpoint}", verbose_only=True)

        response = self.client.request(method, endpoint, json=json, params=params)

        if response.status_code >= 400:
            self.log(f"  <- {response.status_code}: {response.text}")
            response.raise_for_status()

        return response.json()

    def check_health(self) -> bool:
        """Check if API is up; degraded integrations are reported, not fatal."""
        self.log("\n[1/4] Checking API health...")
        try:
            result = self.request("GET", "/health")
            self.log(f"  API Status: {result.get('status', 'unknown')}")
            for name, check in result.get("checks", {}).items():
                self.log(f"    - {name}: {check.get('status')}", verbose_only=True)
            return result.get("status") in {"healthy", "degraded"}
        except httpx.HTTPError as e:
            self.log(f"  ERROR: API health check failed: {e}")
            return False

    def preview_trends(self) -> None:
        """Show the topics the job will choose from."""
        self.log("\n[2/4] Previewing trend topics...")
        params = {"keywords": ",".join(self.config.keywords)} if self.config.keywords else None
        result = self.request("GET", "/shorts/trends", params=params)
        topics = result.get("topics", [])
        for topic in topics[:5]:
            self.log(f"  [{topic.get('score')}] {topic.get('title')} ({topic.get('source')})")
        if not topics:
            self.log("  (No topics returned)")

    def submit_job(self) -> str | None:
        """Submit a background pipeline job."""
        self.log("\n[3/4] Submitting pipeline job...")
        body = {
            "keywords": self.config.keywords,
            "character_hint": self.config.character_hint,
        }
        job = self.request("POST", "/shorts/jobs", json=body)
        self.job_id = job.get("job_id")
        self.log(f"  Job ID: {self.job_id}")
        self.log(f"  Status: {job.get('status')}")
        return self.job_id

    def poll_for_completion(self) -> dict[str, Any]:
        """Poll until the job reaches a terminal state or times out."""
        self.log("\n[4/4] Polling for completion...")

        start_time = time.time()
        last_status = None
        job: dict[str, Any] = {}

        while True:
            elapsed = time.time() - start_time
            if elapsed > self.config.timeout_seconds:
                self.log(f"  TIMEOUT after {elapsed:.0f}s")
                break

            job = self.request("GET", f"/shorts/jobs/{self.job_id}")
            current_status = job.get("status", "unknown")

            if current_status != last_status:
                self.log(f"  [{elapsed:.0f}s] Status: {current_status}")
                last_status = current_status

            if current_status in TERMINAL_STATUSES:
                return job

            time.sleep(self.config.poll_interval_seconds)

        return job

    def print_summary(self, job: dict[str, Any]) -> None:
        """Print final summary."""
        self.log("\n" + "=" * 60)
        self.log("SMOKE TEST SUMMARY")
        self.log("=" * 60)

        topic = job.get("topic") or {}
        script = job.get("script") or {}

        self.log("\nJOB INFO:")
        self.log(f"  ID:        {job.get('job_id')}")
        self.log(f"  Status:    {job.get('status')}")
        self.log(f"  Topic:     {topic.get('title', 'N/A')}")
        self.log(f"  Video URL: {job.get('video_url', 'N/A')}")
        self.log(f"  Published: {job.get('published')}")
        if job.get("error"):
            self.log(f"  Error:     {job.get('error')}")

        if script:
            self.log("\nSCRIPT:")
            self.log(f"  Hook:     {script.get('hook')}")
            self.log(f"  Duration: {script.get('total_duration_seconds')}s")
            for scene in script.get("scenes", []):
                self.log(f"    {scene.get('scene_index')}. {scene.get('text')}")

        self.log("\n" + "=" * 60)

    def run(self) -> bool:
        """Run the full smoke test."""
        self.log("=" * 60)
        self.log("SHORTSBOT SMOKE TEST")
        self.log(f"API: {self.api_url}")
        self.log("=" * 60)

        try:
            if not self.check_health():
                self.log("\nFAILED: API is not reachable")
                return False

            self.preview_trends()

            if not self.submit_job():
                self.log("\nFAILED: Could not submit job")
                return False

            job = self.poll_for_completion()
            self.print_summary(job)

            success = job.get("status") == "done"
            self.log(f"\nRESULT: {'PASSED' if success else 'INCOMPLETE'}")
            return success

        except KeyboardInterrupt:
            self.log("\n\nInterrupted by user")
            if self.job_id:
                self.request("POST", f"/shorts/jobs/{self.job_id}/cancel")
                self.log(f"  Cancellation requested for {self.job_id}")
            return False
        except httpx.HTTPError as e:
            self.log(f"\n\nERROR: {e}")
            if self.config.verbose:
                import traceback
                traceback.print_exc()
            return False
        finally:
            self.client.close()


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="ShortsBot Manual Smoke Test",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--base-url",
        default="http://localhost:4000",
        help="API base URL (default: http://localhost:4000)",
    )
    parser.add_argument(
        "--keywords",
        default="",
        help="Comma-separated keywords (default: server defaults)",
    )
    parser.add_argument(
        "--character",
        default=None,
        help="Avatar preset id",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=120,
        help="Max seconds to wait for the job (default: 120)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    args = parser.parse_args()

    config = SmokeTestConfig(
        base_url=args.base_url,
        keywords=[k.strip() for k in args.keywords.split(",") if k.strip()],
        character_hint=args.character,
        timeout_seconds=args.timeout,
        verbose=args.verbose,
    )

    runner = SmokeTestRunner(config)
    success = runner.run()

    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
