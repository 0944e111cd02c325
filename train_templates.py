#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Template training script.

Builds a recognizer model from a directory of labeled symbol images,
optionally labels extra images with the bootstrap digit recognizer,
removes outliers, pads sparse digit classes and writes the resulting
average templates.
"""

import argparse
import cv2
from pathlib import Path
from typing import Dict, List, Optional

from config import DEFAULT_OUTPUT_DIR, DEFAULT_TEMPLATES_DIR, TEMPLATE_FILE_PATTERN
from symbol_recognition import (
    CharsetType,
    DiagnosticsContext,
    RecognitionError,
    RecognizerModel,
    Sample,
    make_boot_digit_recog,
    pad_if_needed,
    process_multi_labeled,
    remove_outliers,
    train_from_boot,
)
from symbol_recognition.sample_io import load_labeled_samples, load_unlabeled_images, save_templates
from symbol_recognition.settings import TrainingSettings
from utils.logging import cleanup_logs, get_logger, log_section, log_success, setup_logging
from utils.paths import get_debug_dir

log = get_logger()


def collect_multi_labeled(multi_dir: Path, threshold: int,
                          diagnostics: Optional[DiagnosticsContext] = None) -> Dict:
    """
    Segment images holding rows of symbols; the file name gives the text.

    Returns:
        Dictionary with 'samples', 'processed' and 'errors'
    """
    samples: List[Sample] = []
    processed = 0
    errors = 0
    for img_path in sorted(Path(multi_dir).glob(TEMPLATE_FILE_PATTERN)):
        text = img_path.stem.split('_')[0]
        img = cv2.imread(str(img_path), cv2.IMREAD_GRAYSCALE)
        if img is None:
            log.warning(f"Failed to load image: {img_path}")
            errors += 1
            continue
        try:
            samples.extend(process_multi_labeled(img, text=text, threshold=threshold,
                                                 diagnostics=diagnostics))
            processed += 1
        except RecognitionError as e:
            log.error(f"Error processing {img_path.name}: {e}")
            errors += 1
    return {'samples': samples, 'processed': processed, 'errors': errors}


def run_training(samples_dir: Path, output_dir: Path, settings: TrainingSettings,
                 multi_dir: Optional[Path] = None, unlabeled_dir: Optional[Path] = None,
                 digits: bool = False, skip_outliers: bool = False, pad: bool = False,
                 diagnostics: Optional[DiagnosticsContext] = None) -> Dict:
    """
    Train a model from sample directories and write its average templates.

    Args:
        samples_dir: Directory of single-symbol labeled images
        output_dir: Directory the class averages are written to
        settings: Training parameters
        multi_dir: Optional directory of multi-symbol images
        unlabeled_dir: Optional directory of unlabeled digit images
        digits: The model covers the digit charset
        skip_outliers: Keep every sample
        pad: Pad sparse digit classes with synthetic templates
        diagnostics: Optional DiagnosticsContext

    Returns:
        Dictionary with training statistics and the model
    """
    samples = load_labeled_samples(samples_dir, settings.threshold)
    stats = {'loaded': len(samples), 'multi_errors': 0, 'boot_labeled': 0, 'removed': 0}

    if multi_dir is not None:
        multi = collect_multi_labeled(multi_dir, settings.threshold, diagnostics)
        samples.extend(multi['samples'])
        stats['multi_errors'] = multi['errors']
        log.info(f"Multi-symbol images: {multi['processed']} processed, {multi['errors']} errors")

    if unlabeled_dir is not None:
        boot = make_boot_digit_recog(settings.scale_h, settings.boot_line_w, settings.max_y_shift)
        unlabeled = load_unlabeled_images(unlabeled_dir, settings.threshold)
        labeled = train_from_boot(boot, unlabeled, settings.boot_min_score,
                                  settings.threshold, diagnostics)
        samples.extend(labeled)
        stats['boot_labeled'] = len(labeled)

    if not samples:
        raise RecognitionError("no training samples")

    if not skip_outliers:
        result = remove_outliers(samples, settings.outlier_min_score,
                                 settings.outlier_min_fraction, diagnostics=diagnostics)
        stats['removed'] = len(samples) - len(result.kept)
        samples = result.kept

    charset = CharsetType.ARABIC_NUMERALS if digits else CharsetType.UNKNOWN
    model = RecognizerModel.from_samples(
        samples, scale_w=settings.scale_w, scale_h=settings.scale_h, line_w=settings.line_w,
        threshold=settings.threshold, max_y_shift=settings.max_y_shift,
        charset_type=charset, min_nopad=settings.min_nopad)

    if pad:
        model = pad_if_needed(model, settings.scale_h, settings.line_w)

    model.average_samples(diagnostics=diagnostics)
    averages = [Sample(c.average_unscaled.image, c.label) for c in model.classes
                if not c.average_unscaled.is_placeholder]
    stats['written'] = save_templates(averages, output_dir)
    stats['classes'] = model.setsize
    stats['samples'] = model.num_samples
    stats['model'] = model
    return stats


def main(argv=None) -> int:
    """Main function for the template training script."""
    parser = argparse.ArgumentParser(
        description="Train symbol templates from labeled images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Train from labeled digit images and pad sparse classes
  python train_templates.py --digits --pad

  # Add bootstrap-labeled images and keep debug renderings
  python train_templates.py --unlabeled-dir scans --debug
        """
    )

    parser.add_argument("--samples-dir", default=DEFAULT_TEMPLATES_DIR,
                        help=f"Directory of labeled images (default: {DEFAULT_TEMPLATES_DIR})")
    parser.add_argument("--multi-dir", help="Directory of multi-symbol images named by their text")
    parser.add_argument("--unlabeled-dir", help="Directory of unlabeled digit images to bootstrap")
    parser.add_argument("--output-dir", default=DEFAULT_OUTPUT_DIR,
                        help=f"Directory for the average templates (default: {DEFAULT_OUTPUT_DIR})")
    parser.add_argument("--config", help="config.ini with a [Recognizer] section")
    parser.add_argument("--digits", action="store_true", help="Samples cover the digits 0-9")
    parser.add_argument("--pad", action="store_true", help="Pad sparse digit classes")
    parser.add_argument("--no-outliers", action="store_true", help="Skip outlier removal")
    parser.add_argument("--debug", action="store_true", help="Write debug images")
    parser.add_argument("--log-mode", choices=['customer', 'verbose', 'debug'], default='customer',
                        help="Logging verbosity (default: customer)")

    args = parser.parse_args(argv)
    setup_logging(args.log_mode)
    cleanup_logs()

    log_section(log, "Symbol template training", "🔤", {
        "Samples": args.samples_dir,
        "Output": args.output_dir,
    })

    settings = TrainingSettings.load(Path(args.config) if args.config else None)
    diagnostics = DiagnosticsContext(get_debug_dir()) if args.debug else None

    try:
        stats = run_training(
            Path(args.samples_dir), Path(args.output_dir), settings,
            multi_dir=Path(args.multi_dir) if args.multi_dir else None,
            unlabeled_dir=Path(args.unlabeled_dir) if args.unlabeled_dir else None,
            digits=args.digits, skip_outliers=args.no_outliers, pad=args.pad,
            diagnostics=diagnostics)
    except RecognitionError as e:
        log.error(f"Training failed: {e}")
        return 1

    if diagnostics is not None:
        log.info(diagnostics.describe_model(stats['model']))

    log_success(log, f"Trained {stats['classes']} classes from {stats['samples']} samples; "
                     f"wrote {stats['written']} templates")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
