"""python -m kunai_agents — 从 .env 加载配置并启动 KunAI。"""

from kunai_agents.app import build_agent
from kunai_agents.core.config import AgentConfig
from kunai_agents.utils.logger import setup_logging


def main() -> None:
    config = AgentConfig.from_env()
    setup_logging(log_file=config.log_file, debug=config.debug)
    build_agent(config).run()


if __name__ == "__main__":
    main()
