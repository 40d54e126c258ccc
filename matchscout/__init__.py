"""MatchScout - candidate-to-job match scoring with a per-user score cache."""
