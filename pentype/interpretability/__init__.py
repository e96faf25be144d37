"""
Pen-Type Interpretability Module

Tools for understanding what separates the three pen types:
- Feature importance using Cohen's d effect sizes
- PCA loadings over standardized audio and lyric features
"""

from pentype.interpretability.feature_importance import (
    compute_category_importance,
    compute_cohens_d,
    explore_features,
    get_effect_interpretation,
    run_pca,
)

__all__ = [
    "compute_category_importance",
    "compute_cohens_d",
    "explore_features",
    "get_effect_interpretation",
    "run_pca",
]
