"""
FastAPI backend for the form analysis engine.

Turns mobile pose data into engine input and serves the results:
    Stage 1: Pose Preprocessing (validate, per-frame snapshots, averaging)
    Stage 2: Form Analysis (src.biomechanics running / gym analyzers)
    Stage 3: Feedback (drills, tips, low-confidence warnings)
"""
