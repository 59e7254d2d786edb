"""Blog Manager - Hugo 博客管理工具。

环境变量:
    BLOG_ROOT: 博客根目录（默认当前目录）
    BLOG_SHELL: 执行命令使用的 shell
    BLOG_DEBUG: 是否输出 shell 的 stdout/stderr (默认 true)

用法:
    blog-manager new <标题>
"""

__version__ = "0.1.0"

from .app import main

__all__ = ["__version__", "main"]
