import logging

__version__ = "0.3"

wallet_logger = logging.getLogger("tron3.wallet")
api_logger = logging.getLogger("tron3.api")
