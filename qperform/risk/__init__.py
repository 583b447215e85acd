"""
Risk assessment: flags agents at risk of termination.

Modules
-------
assessor : consecutive / total week counting + RISK_RULES
           + determine_at_risk_status() + rank_at_risk_agents()
           — pure functions, no I/O.
"""
