"""
Snapshot aggregation: groups weekly records by agent and by week.

Modules
-------
weekly : group_by_agent() + group_by_week() + agent_monthly_results()
         + unique_week_ranges() — pure functions, no I/O.
"""
