# aerofeeds - aeronautical data from OpenAIP, AviationWeather.gov and FAA NOTAM Search
__version__ = "0.1.0"
