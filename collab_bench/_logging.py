import logging

logger = logging.getLogger("collab_bench")
