import requests
import logging

from config import settings
from core.exceptions import UpstreamError

logger = logging.getLogger(settings.LOGGER_NAME)

class LLMService:
    """A service to interact with a local LLM API (e.g., Ollama)."""

    def __init__(self, base_url: str, model: str, timeout: int = settings.REQUEST_TIMEOUT):
        """
        Initializes the LLMService.

        Args:
            base_url: The base URL of the LLM API.
            model: The name of the model to use.
            timeout: The request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        """
        Sends a prompt to the LLM and returns the response text.

        Raises:
            UpstreamError: On empty prompt, transport failure or empty response.
        """
        if not prompt or not prompt.strip():
            logger.warning("LLM generate called with an empty prompt.")
            raise UpstreamError("Empty prompt provided")

        try:
            logger.info(f"Sending prompt to LLM model '{self.model}'...")
            response = requests.post(
                f'{self.base_url}/api/generate',
                json={
                    'model': self.model,
                    'prompt': prompt,
                    'stream': False
                },
                timeout=self.timeout
            )

            response.raise_for_status()  # Raises an HTTPError for bad responses (4xx or 5xx)

            result = response.json()
        except requests.exceptions.Timeout:
            logger.error(f"LLM request timed out after {self.timeout} seconds.")
            raise UpstreamError("LLM request timed out")
        except requests.exceptions.ConnectionError:
            logger.error(f"Cannot connect to LLM at {self.base_url}. Is the service running?")
            raise UpstreamError("Cannot connect to LLM service")
        except requests.exceptions.HTTPError as e:
            logger.error(f"LLM service returned an error: {e.response.status_code} {e.response.text}")
            raise UpstreamError(f"LLM error: {e.response.status_code}")
        except ValueError as e:
            logger.error(f"LLM returned a non-JSON body: {e}")
            raise UpstreamError("Malformed response from LLM")

        answer = result.get('response') if isinstance(result, dict) else None
        if not isinstance(answer, str) or not answer.strip():
            logger.error("LLM response was empty or malformed.")
            raise UpstreamError("Empty response from LLM")

        logger.info("Successfully received response from LLM.")
        return answer.strip()
