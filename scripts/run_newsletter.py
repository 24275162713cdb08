#!/usr/bin/env python3
"""Scheduler entry point for the weekly/offseason newsletter run."""

from __future__ import annotations

from evw_newsletter.exec.runner import main

if __name__ == "__main__":
    raise SystemExit(main())
