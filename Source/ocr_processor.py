"""
OCR Processing module for SplitSlip
Reads receipt images into raw text with parallel Tesseract workers
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from difflib import SequenceMatcher
from typing import List, Tuple

import cv2
import numpy as np
import pytesseract
from PIL import Image, ImageEnhance, ImageFilter, UnidentifiedImageError

from config import (
    DEFAULT_MAX_WORKERS, IMAGE_REGION_OVERLAP_PX, OCR_LANGUAGES, OCR_PSM,
    SEAM_SIMILARITY_THRESHOLD, SEAM_WINDOW_LINES, WORKERS_MAX, WORKERS_MIN,
)
from data_models import ProcessingMetrics
from errors import RecognitionFailure
from utils import get_logger

logger = get_logger(__name__)

TESSERACT_ERRORS = (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError)


def _similarity_score(str1: str, str2: str) -> float:
    """Similarity between two lines (0-1)"""
    return SequenceMatcher(None, str1.lower(), str2.lower()).ratio()


def merge_region_texts(texts: List[str], threshold: float = SEAM_SIMILARITY_THRESHOLD,
                       window: int = SEAM_WINDOW_LINES) -> Tuple[str, int]:
    """Join strip texts in order, dropping lines repeated across each seam.

    Strips overlap, so the first lines of a strip can repeat the last lines
    of the one above it. Only those few lines are compared. Returns the joined
    text and the number of dropped lines.
    """
    merged: List[str] = []
    dropped = 0

    for text in texts:
        lines = [line for line in text.splitlines() if line.strip()]
        tail = [line.strip() for line in merged[-window:]]

        for position, line in enumerate(lines):
            if position < window and any(_similarity_score(line.strip(), seen) > threshold for seen in tail):
                logger.debug("Dropping seam duplicate: %r", line)
                dropped += 1
                continue
            merged.append(line)

    return '\n'.join(merged), dropped


class ParallelOCRProcessor:
    """Parallel OCR processing of receipt images"""

    def __init__(self, num_workers: int = DEFAULT_MAX_WORKERS):
        self.num_workers = max(WORKERS_MIN, min(WORKERS_MAX, num_workers))
        self.metrics = ProcessingMetrics()
        self.available_languages = self._check_languages()

    def _check_languages(self) -> List[str]:
        """Available Tesseract languages"""
        try:
            languages = pytesseract.get_languages(config='')
            logger.info("Available OCR languages: %s", ', '.join(languages))
            return languages
        except TESSERACT_ERRORS as e:
            logger.warning("Could not check OCR languages: %s", e)
            return ['eng']

    def _get_ocr_language(self) -> str:
        """Configured languages that Tesseract actually has, English otherwise"""
        wanted = [lang for lang in OCR_LANGUAGES.split('+') if lang in self.available_languages]
        return '+'.join(wanted) if wanted else 'eng'

    def preprocess_image(self, image: Image.Image) -> Image.Image:
        """Preprocess image to improve OCR accuracy"""
        # Grayscale
        if image.mode != 'L':
            image = image.convert('L')

        image = ImageEnhance.Contrast(image).enhance(2.0)
        image = image.filter(ImageFilter.SHARPEN)

        # Remove noise with bilateral filter
        img_array = np.array(image)
        img_array = cv2.bilateralFilter(img_array, 9, 75, 75)
        return Image.fromarray(img_array)

    def split_image_into_regions(self, image: Image.Image) -> List[Tuple[int, Image.Image]]:
        """Split image into overlapping horizontal strips"""
        width, height = image.size
        region_height = max(1, height // self.num_workers)
        regions = []

        for i in range(self.num_workers):
            y_start = i * region_height
            if y_start >= height:
                break
            y_end = height if i == self.num_workers - 1 else (i + 1) * region_height + IMAGE_REGION_OVERLAP_PX

            region = image.crop((0, y_start, width, min(y_end, height)))
            regions.append((i, region))

        return regions

    def process_region(self, region_data: Tuple[int, Image.Image]) -> str:
        """Process a single strip with OCR"""
        region_id, region_image = region_data
        logger.debug("Worker %d: processing region", region_id + 1)

        text = pytesseract.image_to_string(
            region_image,
            lang=self._get_ocr_language(),
            config=f'--psm {OCR_PSM}'
        )
        logger.debug("Worker %d: complete", region_id + 1)
        return text

    def recognize_text(self, image_path: str) -> str:
        """Recognize the text of a receipt image.

        Raises RecognitionFailure when the image cannot be read or any strip
        fails; nothing is retried here.
        """
        start_time = time.time()

        try:
            with Image.open(image_path) as image:
                image.load()
                logger.info("Image loaded: %dx%d pixels", image.size[0], image.size[1])
                processed_image = self.preprocess_image(image)
        except (UnidentifiedImageError, OSError) as e:
            raise RecognitionFailure(f"Failed to process receipt image: {e}") from e

        regions = self.split_image_into_regions(processed_image)
        self.metrics.regions_processed = len(regions)

        texts = {}
        with ThreadPoolExecutor(max_workers=self.num_workers) as executor:
            future_to_region = {
                executor.submit(self.process_region, region): region[0]
                for region in regions
            }

            for future in as_completed(future_to_region):
                region_id = future_to_region[future]
                try:
                    texts[region_id] = future.result()
                except TESSERACT_ERRORS as e:
                    raise RecognitionFailure(
                        f"Failed to process receipt image (region {region_id + 1}): {e}"
                    ) from e

        combined_text, dropped = merge_region_texts([texts[region_id] for region_id in sorted(texts)])

        self.metrics.workers_used = self.num_workers
        self.metrics.processing_time = time.time() - start_time
        self.metrics.seam_lines_dropped = dropped

        logger.info("OCR complete in %.2fs", self.metrics.processing_time)
        return combined_text


def recognize_text(image_path: str, num_workers: int = DEFAULT_MAX_WORKERS) -> str:
    """Recognize the text of a receipt image with a fresh processor"""
    return ParallelOCRProcessor(num_workers=num_workers).recognize_text(image_path)
