"""
Recommendation engine: converts warning history + weekly performance into
one prioritised corrective action per agent, plus leadership accountability
checks.

Modules
-------
rules    : CaseRule + AGENT_RULES / LEADERSHIP_RULES + evaluate_rules()
           + generate_agent_recommendation() + generate_leadership_recommendation()
           — pure functions, no I/O.
ranker   : generate_all_recommendations() + generate_all_leadership_recommendations()
           — batch evaluation, stable priority ordering.
reporter : write_recommendation_csv() + write_recommendation_json()
           + write_at_risk_json() — file output.
"""
