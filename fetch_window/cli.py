# === FILE: fetch_window/cli.py ===
#!/usr/bin/env python3
"""
Точка входа для запуска FetchWindow через командную строку.

Команды:
  fetch     Загрузить ресурсы с ограничением числа одновременных запросов
  hash      Посчитать хеш содержимого ресурсов
  config    Показать текущую конфигурацию

Общие опции:
  --config PATH       Путь к YAML/JSON-конфигу (по умолчанию: встроенные значения)
  --log-level LEVEL   Уровень логирования (DEBUG, INFO, ...)
  --log-file PATH     Файл для логов (stderr, если не указан)
  --log-format FORMAT Формат логирования

Команда fetch опции:
  --from-file PATH    Файл со списком ресурсов (по одному в строке)
  --limit INT         Макс. число одновременных запросов (override max_concurrency)
  --timeout SEC       Таймаут на один запрос (секунд)
  --sequential        Загружать строго по одному, в порядке входа
  --ordered           Выводить результаты в порядке входа
  --fail-fast         Код выхода 1, если хотя бы одна загрузка не удалась
  --content           Включить содержимое в отчёт
  --json PATH         Сохранить JSON-отчёт в файл
  --html PATH         Сохранить HTML-отчёт в файл
  --template DIR      Папка с Jinja2-шаблонами
  --pretty            Преформатировать JSON-вывод (отступ 2)

Дополнительно:
  --version, -v       Показать версию FetchWindow

Пример:
  fetch-window fetch --limit 8 --from-file urls.txt --json report.json --pretty
"""
import sys
import time
from pathlib import Path

import click

from fetch_window import __version__
from fetch_window.aggregator import aggregate_outcomes
from fetch_window.config import FetcherConfig, load_config
from fetch_window.engine import Engine
from fetch_window.errors import AggregateFailure, ConfigurationError, FetchError
from fetch_window.fetcher.models import Content
from fetch_window.logger import DEFAULT_FORMAT, init_logging, logger
from fetch_window.report.html_report import render_html
from fetch_window.report.json_report import render_json
from fetch_window.utils import is_supported_locator, merge_locators, read_locators

CONTEXT_SETTINGS = dict(help_option_names=["--help"])


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', '-v', message='FetchWindow, version %(version)s')
@click.option(
    '--config', '-c', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Путь к файлу конфигурации YAML/JSON.'
)
@click.option(
    '--log-level', 'log_level',
    default='WARNING', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Уровень логирования'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Путь к файлу логов (stderr, если не указан)'
)
@click.option(
    '--log-format', 'log_format',
    default=DEFAULT_FORMAT,
    show_default=True,
    help='Строка формата для логов'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Группа команд FetchWindow CLI."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    try:
        cfg = load_config(config_path) if config_path else FetcherConfig()
    except (OSError, ValueError, TypeError) as e:
        print_error(f'Ошибка загрузки конфигурации: {e}')
    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg


@cli.command('fetch', context_settings=CONTEXT_SETTINGS)
@click.argument('locators', nargs=-1)
@click.option(
    '--from-file', '-f', 'locators_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Файл со списком ресурсов'
)
@click.option('--limit', '-l', 'limit', type=int, default=None,
              help='Макс. число одновременных запросов (override max_concurrency)')
@click.option('--timeout', 'timeout', type=float, default=None, help='Таймаут на один запрос (секунд)')
@click.option('--sequential', is_flag=True, help='Загружать строго по одному, в порядке входа')
@click.option('--ordered', is_flag=True, help='Выводить результаты в порядке входа')
@click.option('--fail-fast', 'fail_fast', is_flag=True, help='Ошибка, если хотя бы одна загрузка не удалась')
@click.option('--content', 'include_content', is_flag=True, help='Включить содержимое в отчёт')
@click.option(
    '--json', '-j', 'json_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить JSON-отчёт в файл'
)
@click.option(
    '--html', '-h', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Сохранить HTML-отчёт в файл'
)
@click.option(
    '--template', '-t', 'template_dir',
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Папка с Jinja2-шаблонами (по умолчанию: встроенный шаблон)'
)
@click.option('--pretty', is_flag=True, help='Преформатировать JSON-вывод (отступ 2)')
@click.pass_context
def fetch(ctx, locators, locators_file, limit, timeout, sequential, ordered, fail_fast,
          include_content, json_output, html_output, template_dir, pretty):
    """Загрузить ресурсы и сформировать отчёт."""
    cfg = ctx.obj['config']
    if timeout is not None:
        try:
            cfg = FetcherConfig.model_validate({**cfg.model_dump(), 'timeout': timeout})
        except (OSError, ValueError) as e:
            print_error(f'Ошибка конфигурации: {e}')
    engine = Engine(cfg)

    items = merge_locators(
        cfg.all_locators(),
        read_locators(locators_file) if locators_file else [],
        locators,
    )
    if not items:
        print_error('Не заданы ресурсы для загрузки')
    for locator in items:
        if not is_supported_locator(locator):
            logger.warning("Unsupported locator, it will fail: %s", locator)

    limit = cfg.max_concurrency if limit is None else limit
    ordered = ordered or cfg.ordered
    failure = None
    start = time.monotonic()

    if sequential:
        try:
            contents = engine.fetch_all_sequential(items)
        except FetchError as e:
            print_error(f'Ошибка загрузки: {e}')
        outcomes = [Content(loc, i, c) for i, (loc, c) in enumerate(zip(items, contents))]
        limit = 1
    else:
        try:
            outcomes = engine.fetch_all(
                items, limit,
                raise_on_failure=fail_fast or cfg.raise_on_failure,
                ordered=ordered,
            )
        except ConfigurationError as e:
            print_error(f'Ошибка конфигурации: {e}')
        except AggregateFailure as e:
            failure = e
            outcomes = e.outcomes

    report = aggregate_outcomes(
        outcomes,
        limit=limit,
        elapsed=time.monotonic() - start,
        ordered=ordered,
        include_content=include_content,
    )

    # Если не сохраняем в файл, печатаем в stdout
    if not json_output and not html_output:
        click.echo(report.json(pretty=pretty))

    if json_output:
        try:
            saved_json = render_json(report, json_output, pretty=pretty)
            click.echo(f'JSON report: {saved_json}')
        except OSError as e:
            print_error(f'Ошибка при сохранении JSON: {e}')

    if html_output:
        try:
            saved_html = render_html(report, template_dir, html_output)
            click.echo(f'HTML report: {saved_html}')
        except OSError as e:
            print_error(f'Ошибка при сохранении HTML: {e}')

    if failure is not None:
        print_error(f'Загрузка завершилась с ошибками: {failure}')


@cli.command('hash', context_settings=CONTEXT_SETTINGS)
@click.argument('locators', nargs=-1, required=True)
@click.option('--limit', '-l', 'limit', type=int, default=None,
              help='Макс. число одновременных запросов')
@click.option('--algorithm', '-a', 'algorithm', default=None,
              help='Алгоритм хеширования (по умолчанию из конфига, md5)')
@click.pass_context
def hash_cmd(ctx, locators, limit, algorithm):
    """Посчитать хеш содержимого каждого ресурса."""
    cfg = ctx.obj['config']
    limit = cfg.max_concurrency if limit is None else limit
    try:
        outcomes = Engine(cfg).hash_all(list(locators), limit, algorithm, ordered=True)
    except ConfigurationError as e:
        print_error(f'Ошибка конфигурации: {e}')

    failed = 0
    for outcome in outcomes:
        if outcome.ok:
            click.echo(f'{outcome.content}  {outcome.locator}')
        else:
            failed += 1
            click.secho(f'{outcome.locator}: {outcome.error.reason}', fg='red', err=True)
    if failed:
        sys.exit(1)


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Показать текущую конфигурацию в JSON."""
    cfg = ctx.obj['config']
    click.echo(cfg.model_dump_json(indent=2))


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
