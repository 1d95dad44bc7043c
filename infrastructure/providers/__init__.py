from .kursna_lista import KursnaListaProvider
from .relay_client import RelayRateSource

__all__ = ['KursnaListaProvider', 'RelayRateSource']
