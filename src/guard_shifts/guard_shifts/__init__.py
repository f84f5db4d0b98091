"""Guard Shifts package.

Organized by feature modules (guards, directory, shifts, schedules, reports)
with a thin Flask controller layer over service/repository layers.
"""
