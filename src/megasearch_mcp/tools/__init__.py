"""Search invocation, progress telemetry and response rendering."""
