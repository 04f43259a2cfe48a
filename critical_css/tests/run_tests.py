#!/usr/bin/env python
"""Test runner for critical-css."""

import sys
import pytest
from pathlib import Path

def main():
    """Run tests with coverage reporting."""
    tests_dir = Path(__file__).parent
    project_root = tests_dir.parent.parent

    # Add project root to Python path
    sys.path.insert(0, str(project_root))

    # Configure pytest arguments
    args = [
        '--verbose',
        '--cov=critical_css',
        '--cov-report=term-missing',
        '--cov-report=html',
        '--cov-report=xml',
        '--junitxml=test-results.xml',
        '--timeout=30',
        '-n', 'auto',  # Use all available CPU cores
        str(tests_dir),
    ]

    # Run tests
    return pytest.main(args)

if __name__ == '__main__':
    sys.exit(main())
