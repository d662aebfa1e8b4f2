"""panelgate: request coordination for paid comic-panel image generation.

Sits between an inbound generation request and the image provider:
- Idempotency: at-most-once execution with response replay
- Credits: per-user fixed-window quota with reserve/refund
- Fallback: ordered provider profiles with transient/terminal classification
"""

__version__ = "0.1.0"
