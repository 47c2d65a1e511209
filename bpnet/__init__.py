# flake8: noqa

from ._version import version as __version__

from .core.exception import InvalidArgument
from .core.network import Network
from .core.recurrent import RecurrentNetwork
from .core.trainer import Trainer
