"""
Camada de proxies do Atlas Bridge.

Componentes:
    - refs     → ProxyRef (runtime alvo + caminho)
    - view     → ProxyView (view viva por atributo), subview, read_table
    - resolver → ProxyResolver (travessia iterativa, leitura e escrita)
"""

from .refs import PROXY_TAG, ProxyRef
from .resolver import ProxyResolver
from .view import ProxyView, proxy_ref_of, read_table, subview

__all__ = ["PROXY_TAG", "ProxyRef", "ProxyResolver", "ProxyView", "proxy_ref_of", "read_table", "subview"]
