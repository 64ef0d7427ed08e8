"""
Time-triggered schedule evaluation.

A MinuteTrigger calls ScheduleMatcher.run_once() once per minute; the
matcher loads active schedules, keeps the ones whose minute/hour fields
match the current UTC time and hands them to the Dispatcher without
waiting for the result.
"""
