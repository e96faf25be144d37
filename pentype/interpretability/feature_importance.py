"""
Feature Importance Analysis Module

Explores which features separate the pen types:
- Cohen's d effect sizes of each feature within a category vs. all songs
- PCA over standardized features, with the loadings that drive each component
"""

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.preprocessing import StandardScaler

from pentype.pipeline.config import CATEGORIES, DEFAULT_PCA_COMPONENTS, LABEL_COLUMN, TREE_FEATURES

logger = logging.getLogger(__name__)


def compute_cohens_d(category_values: np.ndarray, global_values: np.ndarray) -> float:
    """
    Compute Cohen's d effect size between a category and the whole corpus.

    Interpretation:
    - |d| < 0.2: negligible
    - |d| < 0.5: small
    - |d| < 0.8: medium
    - |d| >= 0.8: large

    Args:
        category_values: Feature values for songs of one pen type
        global_values: Feature values for all songs

    Returns:
        float: Cohen's d (positive when the category mean is higher)
    """
    category_values = np.asarray(category_values, dtype=float)
    global_values = np.asarray(global_values, dtype=float)

    category_values = category_values[~np.isnan(category_values)]
    global_values = global_values[~np.isnan(global_values)]

    if len(category_values) == 0 or len(global_values) == 0:
        return 0.0

    category_std = np.std(category_values, ddof=1) if len(category_values) > 1 else 0.0
    global_std = np.std(global_values, ddof=1) if len(global_values) > 1 else 0.0

    pooled_std = np.sqrt((category_std**2 + global_std**2) / 2)
    if pooled_std == 0:
        return 0.0

    return float((np.mean(category_values) - np.mean(global_values)) / pooled_std)


def get_effect_interpretation(effect_size: float) -> str:
    """Human-readable magnitude and direction of Cohen's d."""
    abs_d = abs(effect_size)

    if abs_d < 0.2:
        magnitude = "negligible"
    elif abs_d < 0.5:
        magnitude = "small"
    elif abs_d < 0.8:
        magnitude = "medium"
    else:
        magnitude = "large"

    direction = "higher" if effect_size > 0 else "lower"
    return f"{magnitude} ({direction} than average)"


def compute_category_importance(
    df: pd.DataFrame,
    category: str,
    features: Optional[List[str]] = None,
) -> pd.DataFrame:
    """
    Rank features by how strongly they set one pen type apart.

    Args:
        df: Song table with a pen column and feature columns
        category: Pen type to analyze
        features: Feature names (defaults to the tree features present in df)

    Returns:
        DataFrame with feature, effect_size, category_mean, global_mean,
        interpretation and importance_rank, sorted by |effect_size|
    """
    if features is None:
        features = TREE_FEATURES
    features = [f for f in features if f in df.columns]

    category_df = df[df[LABEL_COLUMN] == category]

    results = []
    for feature in features:
        category_values = category_df[feature].to_numpy(dtype=float)
        global_values = df[feature].to_numpy(dtype=float)
        effect_size = compute_cohens_d(category_values, global_values)

        results.append({
            'feature': feature,
            'effect_size': effect_size,
            'category_mean': np.nanmean(category_values) if len(category_values) else np.nan,
            'global_mean': np.nanmean(global_values) if len(global_values) else np.nan,
            'interpretation': get_effect_interpretation(effect_size),
        })

    results_df = pd.DataFrame(
        results,
        columns=['feature', 'effect_size', 'category_mean', 'global_mean', 'interpretation'],
    )

    if len(results_df) > 0:
        results_df['abs_effect_size'] = results_df['effect_size'].abs()
        results_df = results_df.sort_values('abs_effect_size', ascending=False, kind='stable')
        results_df['importance_rank'] = range(1, len(results_df) + 1)
        results_df = results_df.drop(columns=['abs_effect_size']).reset_index(drop=True)

    return results_df


def run_pca(
    df: pd.DataFrame,
    features: Optional[List[str]] = None,
    n_components: int = DEFAULT_PCA_COMPONENTS,
    top_n: int = 3,
) -> Dict[str, Any]:
    """
    PCA over standardized features.

    Rows with missing values are dropped; constant features are skipped.

    Args:
        df: Song table
        features: Feature names (defaults to the tree features present in df)
        n_components: Requested number of components (capped by data shape)
        top_n: Number of highest-|loading| features to report per component

    Returns:
        Dict with:
        - explained_variance_ratio: array per component
        - loadings: DataFrame (features x components)
        - scores: DataFrame of component coordinates, indexed like df
        - top_features: component -> list of feature names
    """
    if features is None:
        features = TREE_FEATURES
    features = [f for f in features if f in df.columns]

    data = df[features].astype(float).dropna()
    features = [f for f in features if data[f].std(ddof=0) > 0]
    data = data[features]

    n_components = min(n_components, data.shape[0], data.shape[1])
    if n_components < 1:
        logger.warning("Not enough data for PCA")
        return {
            'explained_variance_ratio': np.array([]),
            'loadings': pd.DataFrame(index=features),
            'scores': pd.DataFrame(index=data.index),
            'top_features': {},
        }

    scaled = StandardScaler().fit_transform(data.to_numpy())
    pca = PCA(n_components=n_components, random_state=42)
    coords = pca.fit_transform(scaled)

    component_names = [f"PC{i + 1}" for i in range(n_components)]
    loadings = pd.DataFrame(pca.components_.T, index=features, columns=component_names)
    top_features = {
        name: loadings[name].abs().sort_values(ascending=False, kind='stable').index[:top_n].tolist()
        for name in component_names
    }

    logger.info(f"PCA on {len(features)} features: explained variance "
                f"{np.sum(pca.explained_variance_ratio_):.2f} with {n_components} components")

    return {
        'explained_variance_ratio': pca.explained_variance_ratio_,
        'loadings': loadings,
        'scores': pd.DataFrame(coords, index=data.index, columns=component_names),
        'top_features': top_features,
    }


def explore_features(df: pd.DataFrame, features: Optional[List[str]] = None) -> Dict[str, Any]:
    """Effect sizes for every pen type plus a PCA summary."""
    return {
        'category_importance': {
            category: compute_category_importance(df, category, features)
            for category in CATEGORIES
        },
        'pca': run_pca(df, features),
    }
