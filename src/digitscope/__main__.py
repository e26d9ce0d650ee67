"""Command entrypoint for the digitscope package."""

from __future__ import annotations

from digitscope.app import main as ui_main
from digitscope.model.runtime import train_model
from digitscope.settings import configure_logging, load_settings


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)

    if settings.train:
        train_model(settings.model_path)
        return
    ui_main(settings)


if __name__ == "__main__":
    main()
