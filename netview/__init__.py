"""
netview - Neural Network Terminal Visualizer
============================================

Watch a digit classifier train, pan and zoom around its topology, and draw
digits for it to recognize, all inside a terminal (or a pygame window).

Modules:
    ai/         - Classifier, training loop and progress channel
    data/       - CSV example loading
    visualizer/ - View state and panel builders (topology, canvas, chart, predictions)
    ui/         - Display backends, input translation and the render loop
"""

__version__ = "1.0.0"
