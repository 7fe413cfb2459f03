#!/usr/bin/env python3
"""
netview - Main Entry Point
==========================

Train a digit classifier while watching it, explore a network topology, or
draw digits for a trained model to classify.

Usage:
    # Train with the full monitor (topology, error chart, canvas, predictions)
    python main.py --data samples/train.csv

    # Explore the demo topology (arrow keys pan, +/- zoom)
    python main.py --topology

    # Explore a custom topology
    python main.py --topology --layers 4 8 8 3

    # Draw digits for a saved model
    python main.py --draw --model models/classifier.pth

    # Headless accuracy over a test set
    python main.py --evaluate --model models/classifier.pth --test-data samples/test.csv

    # pygame window instead of the terminal
    python main.py --draw --backend window

Press:
    - ESC or Q: Quit (Ctrl+C works too)
    - Arrow keys: Pan the topology
    - +/-: Zoom the topology
    - Mouse: Draw on the canvas, click Reset (or press R) to clear it
"""

import argparse
import os
import sys
from typing import List, Optional

import numpy as np
import torch

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import Config
from netview.ai import Classifier, ProgressChannel, Trainer, TrainOptions, TrainingWorker
from netview.data import load_csv
from netview.ui import DisplayError, InputController, Panels, RenderScheduler, create_display
from netview.utils.logger import LogLevel, get_log_path, get_logger, setup_logging, shutdown_logging
from netview.visualizer import LayerSpec, PixelCanvas, TopologyView, ViewState


logger = get_logger('main')


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="netview - watch a neural network train in your terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
EXAMPLES
========

    python main.py --data samples/train.csv    Train with the live monitor
    python main.py --topology                  Pan/zoom a demo topology
    python main.py --draw --model models/classifier.pth
    python main.py --evaluate --model models/classifier.pth

TIPS
====
- Log output goes to logs/ while a display is open
- Use --backend window if your terminal does not report mouse drags
- Press Q, ESC or Ctrl+C to stop training (the model is still saved)
        """
    )

    # Mode selection
    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        '--topology', action='store_true',
        help='Topology viewer: pan and zoom around the layers given by --layers'
    )
    mode_group.add_argument(
        '--draw', action='store_true',
        help='Draw mode: canvas and predictions for a loaded model'
    )
    mode_group.add_argument(
        '--evaluate', action='store_true',
        help='Headless: print accuracy of --model over --test-data'
    )

    # Model options
    parser.add_argument(
        '--model', type=str, default=None,
        help='Path to model file to load'
    )
    parser.add_argument(
        '--save', type=str, default=None,
        help='Where to save the trained model (default: models/classifier.pth)'
    )

    # Data
    parser.add_argument(
        '--data', type=str, default=None,
        help='Training CSV (label, 784 pixel values per row)'
    )
    parser.add_argument(
        '--test-data', type=str, default=None,
        help='Test CSV used by --evaluate'
    )

    # Training parameters
    parser.add_argument(
        '--epochs', type=int, default=None,
        help='Number of training epochs (0 = until stopped)'
    )
    parser.add_argument(
        '--lr', type=float, default=None,
        help='Learning rate'
    )
    parser.add_argument(
        '--momentum', type=float, default=None,
        help='SGD momentum'
    )
    parser.add_argument(
        '--batch-size', type=int, default=None,
        help='Training batch size'
    )
    parser.add_argument(
        '--layers', type=int, nargs='+', default=None,
        help='Layer sizes: the topology to show with --topology, or the hidden layers to train'
    )

    # Display
    parser.add_argument(
        '--backend', type=str, choices=['terminal', 'window'], default=None,
        help='Render backend (default: terminal)'
    )

    # Other options
    parser.add_argument(
        '--cpu', action='store_true',
        help='Force CPU even if CUDA/MPS is available'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed'
    )
    parser.add_argument(
        '--log-level', type=str, choices=[level.name for level in LogLevel], default='INFO',
        help='Minimum log level (default: INFO)'
    )

    return parser.parse_args(argv)


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Copy CLI flags onto the config."""
    if args.epochs is not None:
        config.EPOCHS = args.epochs
    if args.lr is not None:
        config.LEARNING_RATE = args.lr
    if args.momentum is not None:
        config.MOMENTUM = args.momentum
    if args.batch_size is not None:
        config.BATCH_SIZE = args.batch_size
    if args.backend is not None:
        config.BACKEND = args.backend
    if args.data is not None:
        config.TRAIN_DATA = args.data
    if args.test_data is not None:
        config.TEST_DATA = args.test_data
    if args.cpu:
        config.FORCE_CPU = True
    if args.seed is not None:
        config.SEED = args.seed
    if args.layers is not None:
        if args.topology:
            config.TOPOLOGY_LAYERS = list(args.layers)
        else:
            config.HIDDEN_LAYERS = list(args.layers)
    # Re-run validation on the overridden values
    config.__post_init__()
    return config


def build_scheduler(config: Config, panels: Panels, **collaborators) -> RenderScheduler:
    """Wire a display, input controller and render loop for ``panels``."""
    display = create_display(config)
    controller = InputController(
        display.poll,
        timeout=config.INPUT_POLL_TIMEOUT_MS / 1000.0,
        max_events=config.MAX_EVENTS_PER_POLL,
        pan_step=config.PAN_STEP,
    )
    return RenderScheduler(
        display,
        controller,
        panels,
        view=ViewState(zoom_factor=config.ZOOM_FACTOR),
        canvas=PixelCanvas(config.CANVAS_SIZE),
        refresh_interval=config.REFRESH_INTERVAL_MS / 1000.0,
        cell_size=(config.CANVAS_CELL_WIDTH, config.CANVAS_CELL_HEIGHT),
        topology_ratio=config.TOPOLOGY_HEIGHT_RATIO,
        worker_join_timeout=config.WORKER_JOIN_TIMEOUT,
        **collaborators
    )


def load_model(config: Config, path: str) -> Optional[Classifier]:
    model = Classifier.load(path, expected_layers=config.LAYERS, device=config.DEVICE)
    if model is None:
        print(f"❌ Could not load a {config.LAYERS} model from {path}")
    return model


def default_model_path(config: Config) -> str:
    return os.path.join(config.MODEL_DIR, config.MODEL_FILE)


# =============================================================================
# MODES
# =============================================================================

def run_topology(config: Config) -> int:
    topology = TopologyView(LayerSpec.of(config.TOPOLOGY_LAYERS), max_nodes=config.TOPOLOGY_MAX_NODES)
    build_scheduler(config, Panels.TOPOLOGY, topology=topology).run()
    return 0


def run_draw(config: Config, args: argparse.Namespace) -> int:
    model = load_model(config, args.model or default_model_path(config))
    if model is None:
        return 1
    build_scheduler(config, Panels.CANVAS | Panels.PREDICTIONS, model=model).run()
    return 0


def run_evaluate(config: Config, args: argparse.Namespace) -> int:
    model = load_model(config, args.model or default_model_path(config))
    if model is None:
        return 1
    examples = load_csv(config.TEST_DATA, input_size=config.INPUT_SIZE, num_classes=config.OUTPUT_SIZE)
    result = Trainer(model).evaluate(examples)

    print(f"Correct: {result.correct}")
    print(f"Total: {result.total}")
    print(f"Accuracy: {result.accuracy * 100:.2f}%")
    logger.info(f"Evaluation on {config.TEST_DATA}: {result.correct}/{result.total} ({result.accuracy:.4f})")
    return 0


def run_training(config: Config, args: argparse.Namespace) -> int:
    examples = load_csv(config.TRAIN_DATA, input_size=config.INPUT_SIZE, num_classes=config.OUTPUT_SIZE)

    if args.model:
        model = load_model(config, args.model)
        if model is None:
            return 1
    else:
        model = Classifier(config.LAYERS, config.ACTIVATION, config.DEVICE)

    channel = ProgressChannel(capacity=config.HISTORY_CAPACITY)
    worker = TrainingWorker(Trainer(model), examples, channel, TrainOptions.from_config(config))
    topology = TopologyView(LayerSpec.of(model.layer_sizes), max_nodes=config.TOPOLOGY_MAX_NODES)

    build_scheduler(
        config, Panels.ALL, topology=topology, channel=channel, model=model, worker=worker
    ).run()

    if worker.error is not None:
        print(f"❌ Training failed: {worker.error}")
        return 1
    if worker.is_alive:
        # Weights are still being written; a checkpoint now would be torn
        print("⚠️ Training thread did not stop in time, model not saved")
        return 1

    save_path = args.save or default_model_path(config)
    model.save(save_path, epochs=worker.epochs_completed)
    print(f"💾 Saved model after {worker.epochs_completed} epochs to {save_path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    try:
        config = apply_overrides(Config(), args)
    except AssertionError as e:
        print(f"❌ Invalid option: {e}")
        return 1

    interactive = not args.evaluate
    setup_logging(
        log_dir=config.LOG_DIR,
        level=LogLevel[args.log_level],
        console_output=not interactive or config.BACKEND == 'window',
    )

    if config.SEED is not None:
        np.random.seed(config.SEED)
        torch.manual_seed(config.SEED)

    try:
        if args.topology:
            return run_topology(config)
        if args.draw:
            return run_draw(config, args)
        if args.evaluate:
            return run_evaluate(config, args)
        return run_training(config, args)
    except DisplayError as e:
        logger.error(str(e))
        print(f"❌ {e}")
        return 2
    except (FileNotFoundError, ValueError) as e:
        logger.error(str(e))
        print(f"❌ {e}")
        return 1
    finally:
        log_path = get_log_path()
        if interactive and log_path is not None:
            print(f"📝 Log written to {log_path}")
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
