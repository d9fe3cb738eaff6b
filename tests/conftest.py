# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas Bridge.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas da ponte
- engines de marshalling com capabilities fixas (tabela rica ou degradada)
- sessões completas (host + guest) prontas para uso

Decisões arquiteturais:
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas
    - Sessões são sempre encerradas no teardown
    - Namespaces dos runtimes começam vazios (exceto proxies raiz)

Invariantes:
    - Nenhuma fixture realiza I/O
    - Nenhuma fixture compartilha estado entre testes

Limites explícitos:
    - Não substituir testes de integração com interpretadores reais
"""

import pytest


@pytest.fixture
def bridge_config() -> dict:
    """
    Configuração mínima com dois environments declarados.

    - analysis: declara pandas (capability tabular ativa no guest)
    - plain: sem pacote tabular (tabelas degradam para colunas)
    """
    return {
        "environments": {
            "analysis": {"packages": ["pandas", "scikit-learn"]},
            "plain": {"packages": ["requests"]},
        }
    }


@pytest.fixture
def rich_engine():
    from atlas_bridge.core.marshalling.engine import MarshallingEngine, TypeProfile
    from atlas_bridge.core.values import RuntimeId

    return MarshallingEngine(
        {
            RuntimeId.HOST: TypeProfile(int_bits=None, rich_tables=True),
            RuntimeId.GUEST: TypeProfile(int_bits=32, rich_tables=True),
        }
    )


@pytest.fixture
def degraded_engine():
    from atlas_bridge.core.marshalling.engine import MarshallingEngine, TypeProfile
    from atlas_bridge.core.values import RuntimeId

    return MarshallingEngine(
        {
            RuntimeId.HOST: TypeProfile(int_bits=None, rich_tables=True),
            RuntimeId.GUEST: TypeProfile(int_bits=32, rich_tables=False),
        }
    )


@pytest.fixture
def manager(bridge_config):
    from atlas_bridge.core.session.manager import SessionManager

    return SessionManager(config=bridge_config, session_id="session-test-001")


def _started(manager, env_name):
    manager.activate_environment(env_name, required=True)
    return manager.start_session()


@pytest.fixture
def session(manager):
    """Sessão com o environment `analysis` ativo (tabelas ricas no guest)."""
    s = _started(manager, "analysis")
    yield s
    s.close()


@pytest.fixture
def degraded_session(manager):
    """Sessão com o environment `plain` ativo (sem capability tabular)."""
    s = _started(manager, "plain")
    yield s
    s.close()


@pytest.fixture
def bridge_defaults_yaml() -> str:
    """
    YAML de defaults semelhante ao `bridge.defaults.yaml` de um projeto real.

    Invariantes:
        - YAML sintaticamente válido
        - Pode ser combinado com config local sem ambiguidade
    """
    return """\
runtimes:
  guest:
    int_bits: 64
capabilities:
  tabular: [pandas, polars]
environments:
  analysis:
    packages: [pandas]
"""


@pytest.fixture
def bridge_local_yaml() -> str:
    """YAML de override local: troca nomes de proxy e a largura do guest."""
    return """\
bridge:
  roots:
    guest: py
runtimes:
  guest:
    int_bits: 32
"""
