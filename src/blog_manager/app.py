"""命令行入口。

用法:
    blog-manager new <标题>          新建文章草稿（别名 createPost）
    blog-manager get                 上传截图并输出图片链接（别名 saveImage）
    blog-manager pub <信息...>       发布博客（别名 publish）

全局参数:
    --quiet: 不输出 shell 的 stdout/stderr
    --shell PATH: 指定执行命令的 shell
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from dataclasses import replace

from . import __version__
from .config import Config, get_config
from .images import save_image
from .posts import create_post
from .publish import publish
from .runtime import ShellError

__all__ = ["main", "build_parser", "run"]

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130  # 128 + SIGINT(2)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blog-manager",
        description="Hugo 博客管理工具：新建文章、上传截图、发布网站。",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="不输出 shell 的 stdout/stderr",
    )
    parser.add_argument("--shell", metavar="PATH", help="执行命令使用的 shell")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    new = sub.add_parser("new", aliases=["createPost"], help="新建文章草稿")
    new.add_argument("title", help="文章标题")
    new.set_defaults(handler=_cmd_new)

    get = sub.add_parser("get", aliases=["saveImage"], help="上传截图并输出图片链接")
    get.set_defaults(handler=_cmd_get)

    pub = sub.add_parser("pub", aliases=["publish"], help="发布博客")
    pub.add_argument("message", nargs="+", help="commit 信息，多条或用分号分隔时生成编号列表")
    pub.set_defaults(handler=_cmd_pub)

    return parser


def _cmd_new(args: argparse.Namespace, config: Config) -> int:
    path = create_post(args.title, config)
    print(f"create post: {path}")
    return EXIT_OK


def _cmd_get(args: argparse.Namespace, config: Config) -> int:
    print(save_image(config))
    return EXIT_OK


def _cmd_pub(args: argparse.Namespace, config: Config) -> int:
    publish(args.message, config)
    return EXIT_OK


def run(argv: Sequence[str] | None = None, config: Config | None = None) -> int:
    """解析参数并执行子命令，返回退出码。"""
    args = build_parser().parse_args(argv)

    config = config or get_config()
    if args.quiet:
        config = replace(config, debug=False)
    if args.shell:
        config = replace(config, shell=args.shell)
    logger.debug(f"run: command={args.command} config={config!r}")

    try:
        return args.handler(args, config)
    except ShellError as e:
        logger.error(f"shell {e.phase} failed: {e.message}")
        return EXIT_ERROR
    except (FileNotFoundError, FileExistsError, ValueError) as e:
        logger.error(str(e))
        return EXIT_ERROR
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return EXIT_INTERRUPTED


def _setup_logging(config: Config) -> None:
    log_handlers: list[logging.Handler] = []

    if config.log_debug and config.log_file:
        # LOG_DEBUG 模式：输出到临时文件
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
        log_handlers.append(file_handler)
        log_level = logging.DEBUG
    else:
        # 默认模式：输出到 stderr
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        log_handlers.append(stderr_handler)
        log_level = logging.INFO

    # 第三方库只输出 WARNING 以上
    logging.basicConfig(level=logging.WARNING, handlers=log_handlers)
    logging.getLogger("blog_manager").setLevel(log_level)


def main() -> None:
    """主入口点。"""
    config = get_config()
    _setup_logging(config)
    if config.log_file:
        print(f"debug log: {config.log_file}", file=sys.stderr)
    sys.exit(run(config=config))


if __name__ == "__main__":
    main()
