#!/usr/bin/env python3
"""Pen-Type Classification Pipeline - Orchestrator

This script classifies an artist's songs into three pen types (quill,
fountain, glitter gel) from audio features and lyrics, and reports how well
three classifiers recover the crowd-sourced labels.

Inputs (paths default to PENTYPE_*_PATH environment variables, see .env):
- songs CSV: track_name, album, audio features, lyrics
- membership JSON: {"quill": [...], "fountain": [...], "glitter_gel": [...]}
- optional exclusion list, label overrides and NRC emotion lexicon

Usage:
    python run_analysis.py
    python run_analysis.py --songs data/songs.csv --membership data/membership.json
    python run_analysis.py --lexicon data/NRC-Emotion-Lexicon-Wordlevel-v0.92.txt
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from pentype.pipeline import config, loaders, orchestrator
from pentype.pipeline.errors import PipelineError
from pentype.pipeline.lyric_features import load_emotion_lexicon

# Load environment variables
load_dotenv()


def setup_logging():
    """Configure logging to file and console."""
    log_dir = Path("logging")
    log_dir.mkdir(exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"analysis_{timestamp}.log"

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(),
        ],
    )

    logger = logging.getLogger(__name__)
    logger.info(f"Logging to {log_file}")
    return logger


def parse_args(argv=None):
    paths = config.get_input_paths()

    parser = argparse.ArgumentParser(
        description="Classify songs into pen types using audio features and lyrics",
    )
    parser.add_argument("--songs", default=paths["songs"], help="Song table CSV")
    parser.add_argument("--membership", default=paths["membership"], help="Pen-type membership JSON")
    parser.add_argument("--exclude", default=paths["exclude"],
                        help="Track names to drop, one per line (optional)")
    parser.add_argument("--overrides", default=paths["overrides"],
                        help="Manual label corrections JSON (optional)")
    parser.add_argument("--lexicon", default=paths["lexicon"],
                        help="NRC word-level emotion lexicon (optional)")
    parser.add_argument("--k", type=int, default=config.DEFAULT_NEIGHBOR_PARAMS["k"],
                        help="Neighbors per vote (default: 2)")
    parser.add_argument("--output-dir", default=config.get_output_dir(), help="Where to write results")
    return parser.parse_args(argv)


def main(argv=None):
    """Run the pen-type classification pipeline."""
    args = parse_args(argv)
    logger = setup_logging()

    print("=" * 60)
    print("PEN-TYPE CLASSIFICATION PIPELINE")
    print("=" * 60)

    logger.info(f"Starting analysis: songs={args.songs}, membership={args.membership}, k={args.k}")
    start_time = datetime.now()

    table = loaders.load_song_table(args.songs)
    membership = loaders.load_membership(args.membership)

    # Optional inputs: skip quietly when the default file is absent
    exclude = loaders.load_identifier_list(args.exclude) if Path(args.exclude).exists() else []
    overrides = loaders.load_label_overrides(args.overrides) if Path(args.overrides).exists() else None
    lexicon = load_emotion_lexicon(args.lexicon) if Path(args.lexicon).exists() else None
    if lexicon is None:
        logger.warning(f"Emotion lexicon not found at {args.lexicon}; emotion k-NN will be degenerate")

    try:
        results = orchestrator.run_full_pipeline(
            table,
            membership,
            exclude=exclude,
            label_overrides=overrides,
            emotion_lexicon=lexicon,
            k=args.k,
        )
    except PipelineError as e:
        logger.error(f"Pipeline failed: {e}")
        return 1

    print("\nSaving analysis data...")
    orchestrator.save_analysis_data(results, args.output_dir)

    elapsed = datetime.now() - start_time
    print("\n" + "=" * 60)
    print("ANALYSIS COMPLETE!")
    print("=" * 60)
    print(orchestrator.summarize(results).to_string(index=False))
    if results["issues"]:
        print(f"\n{len(results['issues'])} songs had scoring issues (see issues.csv)")
    print(f"\nTotal time: {elapsed}")

    logger.info(f"Analysis complete! Total time: {elapsed}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
