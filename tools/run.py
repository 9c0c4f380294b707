from __future__ import annotations

import click
from loguru import logger

from application.config import apply_global_settings, configure_mlflow_backend
from core import __version__, settings
from model import REGISTRY
from pipelines import explore_pipeline, price_model_pipeline

HELP_TEXT = f"""
Diamond Price Modeling CLI v{__version__}

Runs the diamond price analysis workflow end to end.

\b
This tool:
- Loads the diamonds dataset (local CSV or Kaggle)
- Adds log(price) as the modeled target
- Splits train/test with a fixed seed
- Cross-validates the candidate models on the same seeded folds
- Fits the model you pick on the full training set
- Reports test metrics on the log and the original price scale

\b
Pipeline sequence:
load → log target → split → explore → cross-validate → final fit → test evaluation
"""

MODEL_CHOICES = sorted(REGISTRY.keys())


def _validate_model_names(_: click.Context, __: click.Option, value: str | None) -> list[str]:
    """
    click callback to validate the `--models` input.
    `value` is a comma-separated string (or None).
    Returns a list of model names.
    """
    if not value:
        # No models passed: default to all
        return list(MODEL_CHOICES)

    # parse comma-separated
    parts = [m.strip() for m in value.split(",") if m.strip()]
    if not parts:
        raise click.BadParameter(f"No model names given. Valid models are: {', '.join(MODEL_CHOICES)}")
    invalid = [m for m in parts if m not in REGISTRY]
    if invalid:
        valid = ", ".join(sorted(MODEL_CHOICES))
        raise click.BadParameter(f"Invalid model name(s): {invalid}. Valid models are: {valid}")

    return parts


def _print_plan(models, final_model, data_path, cv_folds, tracking):
    click.echo(
        "Plan:\n"
        f"  Models: {models}\n"
        f"  Final model: {final_model}\n"
        f"  Data path: {data_path or '<kaggle ' + settings.DIAMONDS_DS + '>'}\n"
        f"  Split: train_size={settings.TRAIN_SIZE}, seed={settings.SEED}\n"
        f"  CV folds: {cv_folds}, seed={settings.FOLD_SEED}\n"
        f"  MLflow tracking: {tracking or 'disabled'}\n"
    )


@click.group(
    name="diamond-price-cli",
    invoke_without_command=True,
    help=HELP_TEXT,
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=False,
    epilog=(
        "EXAMPLES:\n\n"
        "python -m tools.run  # compares all models, fits the default final model\n\n"
        "python -m tools.run --list-models  # list available models\n\n"
        "python -m tools.run --dry-run  # show the plan without running\n\n"
        "python -m tools.run --data-path data/diamonds.csv --final-model linear_reg --cv-folds 5\n\n"
        "python -m tools.run explore  # EDA tables and figures only\n\n"
    ),
)
@click.version_option(version=__version__, message="Diamond Price Modeling CLI v%(version)s", prog_name="Diamond CLI")
@click.option(
    "--list-models",
    is_flag=True,
    help="List available model names and exit.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print the resolved plan (models/options) and exit without running.",
)
@click.option(
    "--models",
    callback=_validate_model_names,
    default=None,
    help=(
        "Comma-separated model names to cross-validate (e.g. 'linear_reg,boost_tree'). "
        "If omitted, all models in REGISTRY are compared. "
        "\n\nValid values: " + ", ".join(sorted(MODEL_CHOICES))
    ),
)
@click.option(
    "--final-model",
    type=click.Choice(MODEL_CHOICES),
    default=None,
    envvar="FINAL_MODEL",
    help="Model to fit on the full training set, picked from the CV leaderboard. Defaults to settings.",
)
@click.option(
    "--data-path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=str),
    default=None,
    envvar="DATA_PATH",
    help="Path to the diamonds CSV file (can also be set via DATA_PATH). Downloads from Kaggle if unset.",
)
@click.option(
    "--cv-folds",
    type=click.IntRange(min=2),
    envvar="CV_FOLDS",
    help="Number of cross-validation folds.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    models: list[str],
    list_models: bool,
    final_model: str | None,
    data_path: str | None,
    cv_folds: int | None,
    dry_run: bool,
) -> None:
    final_model = final_model or settings.FINAL_MODEL
    data_path = data_path or settings.DATA_PATH
    cv_folds = cv_folds or settings.CV_FOLDS

    # If a subcommand is used, don't run default action
    if ctx.invoked_subcommand:
        return

    # dry-run: just show the plan and exit
    if dry_run:
        _print_plan(models, final_model, data_path, cv_folds, settings.MLFLOW_TRACKING_URI)
        raise SystemExit(0)
    # quick list-and-exit
    elif list_models:
        click.echo("Available models:\n  " + "\n  ".join(sorted(MODEL_CHOICES)))
        raise SystemExit(0)
    else:
        # apply global settings (seed, matplotlib, warnings)
        apply_global_settings()

        _print_plan(models, final_model, data_path, cv_folds, settings.MLFLOW_TRACKING_URI)

        try:
            # Setup mlflow (None when tracking is not configured)
            tracking_uri = configure_mlflow_backend()

            logger.info(f"Running pipeline for models: {models}")
            result = price_model_pipeline(
                model_names=models,
                final_model=final_model,
                data_path=data_path,
                cv_folds=cv_folds,
                track=tracking_uri is not None,
            )
            click.echo(f"CV leaderboard (rmse):\n{result['leaderboard'].to_string(index=False)}\n")
            click.echo(f"Test metrics ({result['final_model']}):\n{result['test_metrics'].to_string(index=False)}")
        except Exception as e:
            # error and non-zero exit
            raise click.ClickException(str(e)) from e


@cli.command("explore")
@click.option(
    "--data-path",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=str),
    default=None,
    envvar="DATA_PATH",
    help="Path to the diamonds CSV file. Downloads from Kaggle if unset.",
)
def explore(data_path: str | None):
    """
    Writes exploratory tables and figures for the diamonds dataset.

    \b
    - Summary statistics per column
    - Count of zero-valued x/y/z dimensions
    - Correlation of carat with x/y/z
    - Histograms of price and log(price), carat vs dimension scatterplots
    """
    try:
        # apply global settings (seed, matplotlib, warnings)
        apply_global_settings()
        artifacts = explore_pipeline(data_path or settings.DATA_PATH)
        logger.info(f"Exploration complete -> {settings.ARTIFACT_DIR} ({sum(map(len, artifacts.values()))} files)")
    except Exception as e:
        logger.error(f"Exploration failed: {e}")
        raise click.ClickException(str(e)) from e


if __name__ == "__main__":
    cli()
