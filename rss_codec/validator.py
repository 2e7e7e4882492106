"""RSS feed validation."""

from collections.abc import Sequence

from .checks import (
    check_channel_values,
    check_dates,
    check_feed_size,
    check_image,
    check_items,
    check_lengths,
    check_required_fields,
    check_text_values,
    check_unsupported_fields,
    check_urls,
)
from .config import DEFAULT_LIMITS, FeedLimits
from .dates import parse_date
from .errors import (
    DateParseError,
    DateSortError,
    FeedSizeExceeded,
    ValidationError,
    ValidationErrors,
    XmlWriteError,
)
from .generator import FeedGenerator
from .logging_config import create_execution_logger
from .models import RssData, RssItem, RssVersion
from .parser import FeedParser, ParserConfig


class FeedValidator:
    """Checks feeds against size, format, ordering and per-version rules."""

    def __init__(self, limits: FeedLimits | None = None, execution_id: str | None = None):
        """Initialize FeedValidator with configuration.

        Args:
            limits: Length and size ceilings (defaults to the contract constants)
            execution_id: Execution ID for logging context
        """
        self.limits = limits or DEFAULT_LIMITS
        self.execution_id = execution_id
        self.logger = create_execution_logger("validator", execution_id)

    def collect_errors(
        self,
        data: RssData,
        version: RssVersion | None = None,
        xml: str | None = None,
    ) -> list[ValidationError]:
        """Run every rule and return all violations.

        Args:
            data: Feed to check
            version: Schema to check against; defaults to data.version
            xml: Already-generated document to size-check instead of rendering

        Returns:
            List of violations, empty when the feed is valid
        """
        version = version or data.version
        errors: list[ValidationError] = []
        errors.extend(check_required_fields(data, version))
        errors.extend(check_unsupported_fields(data, version))
        errors.extend(check_lengths(data, self.limits))
        errors.extend(check_text_values(data))
        errors.extend(check_urls(data))
        errors.extend(check_dates(data))
        errors.extend(check_image(data))
        errors.extend(check_items(data))
        errors.extend(check_channel_values(data))

        size_error = self._size_error(data, version, xml)
        if size_error is not None:
            errors.append(size_error)

        self.logger.debug(
            "Validation finished",
            feed_version=version.value,
            error_count=len(errors),
        )
        return errors

    def validate(
        self,
        data: RssData,
        version: RssVersion | None = None,
        xml: str | None = None,
    ) -> None:
        """Validate a feed.

        Raises:
            ValidationErrors: With every violation found
        """
        errors = self.collect_errors(data, version, xml)
        if errors:
            self.logger.warning(
                f"Validation failed with {len(errors)} errors",
                error_count=len(errors),
                fields=sorted({error.field for error in errors}),
            )
            raise ValidationErrors(errors)

    def validate_feed(self, xml: str | bytes, config: ParserConfig | None = None) -> RssData:
        """Parse a raw document, then validate it against its own version.

        Returns:
            The parsed feed

        Raises:
            FeedSizeExceeded: If the raw document is over the size ceiling
            RssError: Any parse failure (see FeedParser.parse)
            ValidationErrors: If the parsed feed breaks any rule
        """
        if isinstance(xml, str):
            check_feed_size(xml, self.limits)
        elif len(xml) > self.limits.max_feed_size:
            raise FeedSizeExceeded(len(xml), self.limits.max_feed_size)

        data = FeedParser(config, self.execution_id).parse(xml)
        text = xml if isinstance(xml, str) else None
        self.validate(data, data.version, text)
        return data

    def check_feed_size(self, xml: str) -> int:
        """Return the byte size of an already-generated document.

        Raises:
            FeedSizeExceeded: If the document is over the size ceiling
        """
        return check_feed_size(xml, self.limits)

    def check_date_order(self, items: Sequence[RssItem], newest_first: bool = False) -> None:
        """Detect the first pair of dated items that breaks the order.

        Items without a parsable date are skipped; this never reorders.

        Args:
            items: Items in stored order
            newest_first: Check reverse-chronological instead of oldest-first

        Raises:
            DateSortError: For the first inverted pair
        """
        previous = None
        for index, item in enumerate(items):
            if not item.pub_date:
                continue
            try:
                moment = parse_date(item.pub_date)
            except DateParseError:
                continue
            if previous is not None:
                prev_index, prev_moment, prev_text = previous
                inverted = moment > prev_moment if newest_first else moment < prev_moment
                if inverted:
                    self.logger.debug(
                        "Items out of date order",
                        index=prev_index,
                        next_index=index,
                    )
                    raise DateSortError(prev_index, index, prev_text, item.pub_date)
            previous = (index, moment, item.pub_date)

    def _size_error(
        self, data: RssData, version: RssVersion, xml: str | None
    ) -> ValidationError | None:
        if xml is None:
            xml = FeedGenerator(self.limits, self.execution_id).render(data, version)
        try:
            check_feed_size(xml, self.limits)
        except (FeedSizeExceeded, XmlWriteError) as e:
            return ValidationError("feed", str(e))
        return None


def validate(
    data: RssData,
    version: RssVersion | None = None,
    xml: str | None = None,
    limits: FeedLimits | None = None,
) -> None:
    """Validate a feed (see FeedValidator.validate)."""
    FeedValidator(limits).validate(data, version, xml)


def validate_feed(
    xml: str | bytes,
    config: ParserConfig | None = None,
    limits: FeedLimits | None = None,
) -> RssData:
    """Parse and validate a raw document (see FeedValidator.validate_feed)."""
    return FeedValidator(limits).validate_feed(xml, config)


def check_date_order(items: Sequence[RssItem], newest_first: bool = False) -> None:
    """Raise DateSortError for the first out-of-order pair of items."""
    FeedValidator().check_date_order(items, newest_first)
