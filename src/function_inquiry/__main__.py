"""Asks the LLM about the weather in Berlin, letting it call the sample lookup functions."""

import asyncio
import logging
import sys

from dotenv import load_dotenv

from .core import Inquiry
from .errors import InquiryError
from .tools import lookup_city_latitude, lookup_city_longitude, lookup_weather_by_coordinate

QUESTION = "What is the weather like in Berlin right now?"

logger = logging.getLogger(__name__)


async def main() -> str:
    inquiry = Inquiry()

    inquiry.register_function(lookup_city_latitude, "returns the latitude of a given city")
    inquiry.register_function(lookup_city_longitude, "returns the longitude of a given city")
    inquiry.register_function(lookup_weather_by_coordinate, "returns the weather for a given latitude and longitude")

    return await inquiry.answer_async(QUESTION)


def run():
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        answer = asyncio.run(main())
    except InquiryError as e:
        logger.error("Could not answer: %s: %s", type(e).__name__, e)
        sys.exit(1)

    print(answer)


if __name__ == "__main__":
    run()
