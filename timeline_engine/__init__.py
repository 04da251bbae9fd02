"""Timeline composition engine.

In-memory composition documents (tracks, items, scenes), keyframe and spring
evaluation, scene transition and track layering resolution, and the command
layer that is the only sanctioned way to mutate a document.
"""

__version__ = "0.1.0"
