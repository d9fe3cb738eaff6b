# src/atlas_bridge/core/__init__.py
"""
Core do Atlas Bridge.

Este pacote contém a implementação canônica da ponte de variáveis entre dois
runtimes embarcados no mesmo processo (host e guest).

Componentes principais:
    - values      → modelo canônico de valores (Value, Table, RuntimeId)
    - marshalling → conversão de valores entre os sistemas de tipos
    - runtime     → Runtime Adapters (único acesso aos interpretadores)
    - proxy       → views vivas sobre o namespace do outro runtime
    - session     → environments, ciclo de vida da sessão e log estruturado
    - config      → resolução de configuração (merge, validação, hashing)

Princípios fundamentais:
    - Nenhuma leitura é cacheada: toda resolução consulta o runtime vivo
    - Nenhuma conversão silenciosa: falhas são exceções tipadas
    - Capabilities de tipo são fixadas uma única vez, no início da sessão

Limites explícitos:
    - Não instala pacotes nem provisiona environments
    - Não suporta mais de dois runtimes
"""
