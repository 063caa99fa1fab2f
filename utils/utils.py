import time

import cpuinfo
import psutil


def get_cpu_info():
    """Returns CPU info using py-cpuinfo."""
    try:
        cpu_info = cpuinfo.get_cpu_info()
        return cpu_info['brand_raw']
    except Exception as e:
        return f"Error: {e}"


def get_core_info():
    """Returns physical/logical core counts using psutil."""
    return f"{psutil.cpu_count(logical=False)} physical, {psutil.cpu_count(logical=True)} logical"


def get_ram_info():
    """Returns RAM info using psutil."""
    ram = psutil.virtual_memory()
    return f"Total: {ram.total / (1024 ** 3):.2f} GB, Available: {ram.available / (1024 ** 3):.2f} GB"


def write_result_header(file):
    file.write(f"# CPU Info: {get_cpu_info()}\n")
    file.write(f"# CPU Cores: {get_core_info()}\n")


def get_formatted_elapsed_time(start_time):
    elapsed_time = time.time() - start_time
    formatted_time = time.strftime("%H:%M:%S", time.gmtime(elapsed_time))
    return formatted_time
