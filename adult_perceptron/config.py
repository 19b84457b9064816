import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=str(ENV_PATH))

DATA_DIR = Path(os.getenv("ADULT_DATA_DIR", str(BASE_DIR / "data")))
LOGS_DIR = Path(os.getenv("ADULT_LOGS_DIR", str(BASE_DIR / "logs")))
MODELS_DIR = Path(os.getenv("ADULT_MODELS_DIR", str(BASE_DIR / "models")))

# Pinned to the commit the census sample was published against
ADULT_DATASET_URL = os.getenv(
    "ADULT_DATASET_URL",
    "https://raw.githubusercontent.com/dotnet/machinelearning/"
    "244a8c2ac832657af282aa312d568211698790aa/test/data/adult.train",
)
ADULT_DATASET_FILENAME = os.getenv("ADULT_DATASET_FILENAME", "adult.txt")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "60"))

TEST_FRACTION = float(os.getenv("TEST_FRACTION", "0.1"))
LEARNING_RATE = float(os.getenv("LEARNING_RATE", "0.1"))
NUM_ITERATIONS = int(os.getenv("NUM_ITERATIONS", "100"))
NATIVE_COUNTRY_MIN_COUNT = int(os.getenv("NATIVE_COUNTRY_MIN_COUNT", "10"))
RANDOM_SEED = int(os.getenv("RANDOM_SEED", "42"))
