"""Entry points for the Obsidian News generator: Lambda handler and CLI."""

import argparse
import json
import sys
from datetime import UTC, datetime
from typing import Any

from .bedrock import BedrockTextModel, create_bedrock_client
from .classify import TopicClassifier
from .config import Config, MissingCredentialError
from .draft import ArticleDrafter
from .logging_config import create_execution_logger, setup_structured_logging
from .pipeline import Pipeline, PipelineResult
from .rss import FeedProcessor
from .sitemap import write_sitemap
from .store import FeedStore

EXIT_OK = 0
EXIT_MISSING_CREDENTIAL = 1
EXIT_FAILURE = 2


def new_execution_id(prefix: str) -> str:
    return f"{prefix}_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"


def build_pipeline(config: Config, execution_id: str) -> Pipeline:
    """Construct the pipeline and its service handles from configuration."""
    store_config = config.get_store_config()
    classifier_config = config.get_classifier_config()
    drafter_config = config.get_drafter_config()

    bedrock_client = create_bedrock_client(config.aws_region)

    return Pipeline(
        store=FeedStore(
            store_config.feed_file,
            max_posts=store_config.max_posts,
            execution_id=execution_id,
        ),
        feed_processor=FeedProcessor(execution_id=execution_id),
        classifier=TopicClassifier(
            BedrockTextModel(bedrock_client, classifier_config, execution_id),
            fail_open=config.classifier_fail_open,
            execution_id=execution_id,
        ),
        drafter=ArticleDrafter(
            BedrockTextModel(bedrock_client, drafter_config, execution_id),
            execution_id=execution_id,
        ),
        feed_urls=config.get_feed_urls(),
        execution_id=execution_id,
    )


def run_generator(config: Config, execution_id: str) -> PipelineResult:
    """Check the credential, then run the pipeline once.

    Raises:
        MissingCredentialError: Before any network activity
    """
    config.require_credential()
    return build_pipeline(config, execution_id).run()


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Lambda handler for scheduled generator runs.

    Args:
        event: Lambda event data
        context: Lambda context object

    Returns:
        Response dictionary with status and metrics
    """
    config = Config()
    setup_structured_logging(config.log_level)

    execution_id = new_execution_id("lambda")
    main_logger = create_execution_logger("main", execution_id)
    main_logger.log_execution_start(
        lambda_request_id=getattr(context, "aws_request_id", "unknown"),
        lambda_function_name=getattr(context, "function_name", "unknown"),
    )

    try:
        result = run_generator(config, execution_id)
    except MissingCredentialError as e:
        main_logger.error(str(e), error=str(e))
        main_logger.log_execution_end(success=False, error=str(e))
        return {
            "statusCode": 500,
            "body": json.dumps(
                {
                    "message": "Obsidian News generator execution failed",
                    "execution_id": execution_id,
                    "error": str(e),
                }
            ),
        }
    except Exception as e:
        error_msg = f"Critical error in Lambda handler: {e}"
        main_logger.error(error_msg, error=str(e))
        main_logger.log_execution_end(success=False, error=error_msg)
        return {
            "statusCode": 500,
            "body": json.dumps(
                {
                    "message": "Obsidian News generator execution failed",
                    "execution_id": execution_id,
                    "error": error_msg,
                }
            ),
        }

    main_logger.log_execution_end(success=True, status=result.status.value)
    return {
        "statusCode": 200,
        "body": json.dumps(
            {
                "message": "Obsidian News generator execution completed",
                "execution_id": execution_id,
                "status": result.status.value,
                "published": result.published,
                "slug": result.post.slug if result.post else None,
                "metrics": result.metrics,
            }
        ),
    }


def generate_command(config: Config) -> int:
    execution_id = new_execution_id("cli")
    main_logger = create_execution_logger("main", execution_id)

    try:
        result = run_generator(config, execution_id)
    except MissingCredentialError as e:
        main_logger.error(str(e), error=str(e))
        return EXIT_MISSING_CREDENTIAL
    except Exception as e:
        # A failed run publishes nothing; only the credential check exits non-zero
        main_logger.error(f"Generator run failed: {e}", error=str(e))
        return EXIT_OK

    main_logger.info(
        "Generator finished",
        status=result.status.value,
        published=result.published,
    )
    return EXIT_OK


def sitemap_command(config: Config) -> int:
    execution_id = new_execution_id("cli")
    main_logger = create_execution_logger("sitemap", execution_id)
    store_config = config.get_store_config()

    try:
        document = FeedStore(
            store_config.feed_file,
            max_posts=store_config.max_posts,
            execution_id=execution_id,
        ).load()
        url_count = write_sitemap(
            document, store_config.sitemap_file, store_config.site_url
        )
    except Exception as e:
        main_logger.error(f"sitemap error: {e}", error=str(e))
        return EXIT_FAILURE

    main_logger.info(
        f"Wrote sitemap: {url_count}",
        path=store_config.sitemap_file,
        url_count=url_count,
    )
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """Console entry point; returns the process exit code."""
    parser = argparse.ArgumentParser(
        prog="obsidian-news",
        description="Publish one new technology article to the feed document.",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="generate",
        choices=("generate", "sitemap"),
        help="generate a post (default) or rebuild the sitemap",
    )
    args = parser.parse_args(argv)

    config = Config()
    setup_structured_logging(config.log_level)

    if args.command == "sitemap":
        return sitemap_command(config)
    return generate_command(config)


def run() -> None:
    sys.exit(main())
