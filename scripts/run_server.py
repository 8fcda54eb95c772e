#!/usr/bin/env python
"""
Régie Virtuelle 자막 서버 실행 스크립트

사용법:
    # 기본 실행 (0.0.0.0:3000)
    python scripts/run_server.py

    # 개발 모드 (핫 리로드)
    python scripts/run_server.py --env dev --reload

    # 다른 설정 파일, 포트 사용
    python scripts/run_server.py --config /data/regie/config.json --port 8080
"""

import argparse
import logging
import os
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def setup_logging(level: str = "INFO") -> None:
    """로깅 설정"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # 폴링 주기마다 찍히는 httpx 요청 로그 억제
    logging.getLogger("httpx").setLevel(logging.WARNING)


def load_env_file(env: str) -> None:
    """환경별 .env 파일 로드"""
    from dotenv import load_dotenv

    env_files = [
        PROJECT_ROOT / f".env.{env}",
        PROJECT_ROOT / ".env.local",
        PROJECT_ROOT / ".env",
    ]

    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file)
            print(f"[Config] 환경 파일 로드: {env_file}")
            break


def main() -> None:
    """메인 함수"""
    parser = argparse.ArgumentParser(
        description="Régie Virtuelle 자막 서버",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
예시:
    python scripts/run_server.py
    python scripts/run_server.py --env dev --reload --log-level DEBUG
    python scripts/run_server.py --host 127.0.0.1 --port 8080
        """,
    )

    parser.add_argument(
        "--env",
        choices=["dev", "prod"],
        default="prod",
        help="실행 환경 (기본: prod)",
    )
    parser.add_argument(
        "--host",
        default=None,
        help="바인딩 호스트 (기본: 환경변수 API_HOST 또는 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="바인딩 포트 (기본: 환경변수 API_PORT 또는 3000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="코드 변경 시 자동 리로드 (개발 모드용)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="로그 레벨",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="설정 파일 경로 (기본: 환경변수 CONFIG_FILE 또는 config.json)",
    )

    args = parser.parse_args()

    # 환경 설정
    os.environ["ENV"] = args.env
    load_env_file(args.env)

    log_level = args.log_level or ("DEBUG" if args.env == "dev" else "INFO")
    setup_logging(log_level)

    host = args.host or os.getenv("API_HOST", "0.0.0.0")
    port = args.port or int(os.getenv("API_PORT", "3000"))
    if args.config:
        os.environ["CONFIG_FILE"] = args.config
    config_file = os.getenv("CONFIG_FILE", "config.json")

    print(f"""
========================================
  RÉGIE VIRTUELLE v4.0 - SERVEUR
========================================
  환경: {args.env}
  주소: http://{host}:{port}
  설정: {config_file}
  폴링: {os.getenv("POLL_INTERVAL_MS", "500")}ms
========================================
    """)

    import uvicorn

    try:
        uvicorn.run(
            "api.server:app",
            host=host,
            port=port,
            log_level=log_level.lower(),
            reload=args.reload,
            reload_dirs=(
                [str(PROJECT_ROOT / d) for d in ("api", "config", "lib", "poller")]
                if args.reload
                else None
            ),
        )
    except KeyboardInterrupt:
        print("\n[Server] 서버 종료")
    except SystemExit as e:
        # 포트 바인딩 실패 등 uvicorn 시작 실패
        if e.code:
            print(f"[Error] 서버 시작 실패 (code={e.code})")
        raise


if __name__ == "__main__":
    main()
