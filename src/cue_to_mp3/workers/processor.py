"""Conversion workers and the bounded pool that runs them"""
import os
import subprocess
from concurrent.futures import ThreadPoolExecutor, as_completed

from ..utils.helpers import run_command


def build_encode_command(job, quality):
    """
    Build the ffmpeg command that encodes one job to MP3.

    Args:
        job: ConversionJob to encode
        quality: LAME VBR quality passed to -q:a

    Returns:
        Command as a list of arguments
    """
    cmd = ["ffmpeg", "-y", "-i", job.source, "-q:a", str(quality)]
    for key, value in job.tags():
        cmd += ["-metadata", f"{key}={value}"]
    cmd += ["-loglevel", "error", job.destination]
    return cmd


def convert(job, counters, config, logfile, log):
    """
    Encode a single track or standalone file to MP3.

    Exactly one of counters.add_success() / counters.add_error() is called,
    whatever happens. A failed destination file is left where it is.

    Args:
        job: ConversionJob describing source, destination and tags
        counters: Shared RunCounters
        config: Configuration (quality and per-job timeout)
        logfile: Path to the log file
        log: Function to call for logging messages

    Returns:
        Dictionary with status and output path
    """
    name = os.path.basename(job.destination)
    result = {"status": "error", "output": job.destination}
    try:
        exit_code = run_command(
            build_encode_command(job, config.quality), logfile, timeout=config.job_timeout
        )
        if exit_code == 0:
            result["status"] = "success"
        else:
            result["message"] = f"ffmpeg failed with exit code {exit_code}"
    except subprocess.TimeoutExpired:
        result["message"] = f"ffmpeg timed out after {config.job_timeout}s"
    except OSError as e:
        result["message"] = str(e)
    finally:
        if result["status"] == "success":
            counters.add_success()
        else:
            counters.add_error()

    if result["status"] == "success":
        log(f"✅ {name}")
    else:
        log(f"❌ Failed: {name} ({result['message']})")
    return result


def effective_parallelism(parallelism):
    """Clamp a user-supplied worker count to at least 1"""
    try:
        value = int(parallelism)
    except (TypeError, ValueError):
        return 1
    return value if value > 0 else 1


def run_jobs(jobs, parallelism, counters, config, logfile, log):
    """
    Run conversion jobs on a bounded thread pool.

    Jobs are submitted in order; they may finish in any order. A failing job
    never cancels the others.

    Args:
        jobs: Sequence of ConversionJob
        parallelism: Maximum number of concurrent conversions (<= 0 means 1)
        counters: Shared RunCounters
        config: Configuration
        logfile: Path to the log file
        log: Function to call for logging messages

    Returns:
        List of result dictionaries in the same order as jobs
    """
    jobs = list(jobs)
    if not jobs:
        return []

    max_workers = effective_parallelism(parallelism)
    results = [None] * len(jobs)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(convert, job, counters, config, logfile, log): idx
            for idx, job in enumerate(jobs)
        }
        for future in as_completed(futures):
            idx = futures[future]
            try:
                results[idx] = future.result()
            except Exception as e:
                # convert() has already counted this job in its finally block
                log(f"💥 Exception in conversion thread: {str(e)}")
                results[idx] = {"status": "error", "output": jobs[idx].destination, "message": str(e)}

    return results
