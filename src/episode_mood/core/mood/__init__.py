"""
Episode Mood Core

Modules:
    - models: Service response models and pipeline value types
    - spotify: Spotify Web API client for audio features/analysis
    - resolvers: Episode -> version -> records -> links -> track IDs
    - aggregator: Per-track mood formula and averaging
    - pipeline: Stage orchestration under one deadline
"""
