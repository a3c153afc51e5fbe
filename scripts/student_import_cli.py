#!/usr/bin/env python3
"""
Student Roster Import CLI - Dual Mode

This script can operate in two modes:
1. Direct mode (default): Runs the import service in-process
2. API mode: Uploads the file to the FastAPI backend

Usage:
    # Direct mode (uses services directly)
    python scripts/student_import_cli.py import --file roster.xlsx

    # API mode (uses FastAPI backend)
    python scripts/student_import_cli.py import --file roster.xlsx --api-url http://localhost:8000

    # JSON output
    python scripts/student_import_cli.py import --file roster.xlsx --format json
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio
import json
import logging
from typing import Dict, List, Optional

import click
from dotenv import load_dotenv
import requests

from services.student_import_service import StudentImportService

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', 'cli.log')

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOG_FILE),
        logging.StreamHandler(sys.stderr)
    ]
)

logger = logging.getLogger('student_import_cli')

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@click.group()
def cli():
    """Student Roster Import CLI - Dual Mode Support"""


@cli.command('import')
@click.option('--file', '-f', 'file_path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Path to roster spreadsheet')
@click.option('--format', '-o', 'output_format', type=click.Choice(['table', 'json']), default='table',
              show_default=True, help='Output format')
@click.option('--api-url', envvar='API_URL', help='FastAPI backend URL (enables API mode)')
def import_cmd(file_path: str, output_format: str, api_url: Optional[str]):
    """Import students from a spreadsheet."""

    if api_url:
        click.echo(f"API Mode: Using backend at {api_url}", err=True)
        students = import_via_api(api_url, file_path)
    else:
        click.echo("Direct Mode: Using local import service", err=True)
        students = import_direct(file_path)

    print_students(students, output_format)


def print_students(students: List[Dict], output_format: str):
    """Print imported students as a table or as JSON."""
    if output_format == 'json':
        click.echo(json.dumps(students, ensure_ascii=False, indent=2))
        return

    click.echo(f"{'No':>5}  {'Code':<15}  Name")
    click.echo("-" * 50)
    for student in students:
        click.echo(f"{str(student['No']):>5}  {student['Code']:<15}  {student['Name']}")
    click.echo(f"\n{len(students)} students imported")


# ============================================================================
# Direct Mode Implementation (Uses Services Directly)
# ============================================================================

def import_direct(file_path: str) -> List[Dict]:
    """Import file using the in-process service."""
    click.echo(f"Importing: {file_path}", err=True)

    def on_progress(stage: str, percent: float, message: str):
        bar_length = 40
        filled = int(bar_length * percent / 100)
        bar = '█' * filled + '░' * (bar_length - filled)
        click.echo(f"\r[{bar}] {percent:.1f}% - {stage}: {message}", nl=False, err=True)

    try:
        service = StudentImportService(progress_callback=on_progress)
        students = asyncio.run(service.import_students(file_path))
        click.echo(err=True)  # New line after progress bar
    except Exception as e:
        logger.error(f"Import failed: {e}", exc_info=True)
        click.echo(f"\nImport failed: {e}", err=True)
        sys.exit(1)

    return [student.to_dict() for student in students]


# ============================================================================
# API Mode Implementation (Uses FastAPI Backend)
# ============================================================================

def import_via_api(api_url: str, file_path: str) -> List[Dict]:
    """Import file via FastAPI backend."""
    click.echo(f"Uploading {file_path} to {api_url}...", err=True)

    try:
        with open(file_path, 'rb') as f:
            files = {
                'file': (Path(file_path).name, f, XLSX_CONTENT_TYPE)
            }
            response = requests.post(
                f"{api_url.rstrip('/')}/api/students/import",
                files=files,
                timeout=30
            )
    except requests.RequestException as e:
        logger.error(f"Upload failed: {e}", exc_info=True)
        click.echo(f"Import failed: {e}", err=True)
        sys.exit(1)

    if response.status_code != 200:
        click.echo(f"Import failed ({response.status_code}): {response.text}", err=True)
        sys.exit(1)

    result = response.json()
    logger.info(f"Backend imported {result['total']} students from {result['filename']}")
    return result['students']


if __name__ == '__main__':
    cli()
