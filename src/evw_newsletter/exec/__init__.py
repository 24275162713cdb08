"""Run orchestration: idempotency guard, quality gates, commit paths, and the driver."""
