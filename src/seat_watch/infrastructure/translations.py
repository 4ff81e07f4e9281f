from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

ROUTE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        # Area 1
        "新宿～富士五湖線": "Shinjuku - Fuji Five Lakes",
        "新宿～甲府線": "Shinjuku - Kofu",
        "新宿～身延・南アルプス市八田線": "Shinjuku - Minobu/South Alps Hatta",
        "新宿～諏訪・岡谷・茅野線": "Shinjuku - Suwa/Okaya/Chino",
        "新宿～伊那・飯田線": "Shinjuku - Ina/Iida",
        "新宿～松本線": "Shinjuku - Matsumoto",
        "新宿・池袋～長野線": "Shinjuku/Ikebukuro - Nagano",
        "新宿～白馬線": "Shinjuku - Hakuba",
        "新宿～塩尻・木曽福島線": "Shinjuku - Shiojiri/Kiso-Fukushima",
        "成田空港～軽井沢線": "Narita Airport - Karuizawa",
        "新宿～上高地線（さわやか信州号）": "Shinjuku - Kamikochi (Sawayaka Shinshu)",
        "新宿～上高地線": "Shinjuku - Kamikochi",
        "新宿～飛騨高山線": "Shinjuku - Hida Takayama",
        "新宿～名古屋線": "Shinjuku - Nagoya",
        "新宿・渋谷～浜松線": "Shinjuku/Shibuya - Hamamatsu",
        "新宿・横浜～松山線": "Shinjuku/Yokohama - Matsuyama",
        # Area 2
        "名古屋～福岡線": "Nagoya - Fukuoka",
        "名古屋～岡山線": "Nagoya - Okayama",
        "名古屋～仙台線": "Nagoya - Sendai",
        "名古屋～富士五湖線": "Nagoya - Fuji Five Lakes",
        "名古屋～上高地線": "Nagoya - Kamikochi",
        "名古屋～高山線": "Nagoya - Takayama",
        "名古屋～白川郷・金沢線": "Nagoya - Shirakawa-go/Kanazawa",
        "名古屋～金沢線": "Nagoya - Kanazawa",
        "名古屋～松本線": "Nagoya - Matsumoto",
        # Area 3
        "羽田多摩センター線": "Haneda - Tama Center",
        "羽田八王子線": "Haneda - Hachioji",
    }
)

STATION_NAMES: Mapping[str, str] = MappingProxyType(
    {
        # Shinjuku / Tokyo terminals
        "バスタ新宿（南口）": "Shinjuku Expressway Bus Terminal (South Exit)",
        "新宿西口２５番のりば": "Shinjuku West Exit Platform 25",
        "東京駅八重洲南口": "Tokyo Station Yaesu South Exit",
        "東京駅鉄鋼ビル": "Tokyo Station Tekko Building",
        "渋谷マークシティバスターミナル": "Shibuya Mark City Bus Terminal",
        "池袋駅東口": "Ikebukuro Station East Exit",
        "横浜駅ＹＣＡＴ": "Yokohama Station YCAT",
        "品川バスターミナル": "Shinagawa Bus Terminal",
        "羽田空港第１ターミナル": "Haneda Airport Terminal 1",
        "羽田空港第２ターミナル": "Haneda Airport Terminal 2",
        # Chuo Expressway
        "中央道三鷹": "Chuo Expressway Mitaka",
        "中央道府中": "Chuo Expressway Fuchu",
        "中央道八王子": "Chuo Expressway Hachioji",
        "中央道大月": "Chuo Expressway Otsuki",
        # Fuji Five Lakes
        "富士急ハイランド": "Fuji-Q Highland",
        "河口湖駅": "Kawaguchiko Station",
        "富士山駅": "Fujisan Station",
        "富士山五合目": "Mt. Fuji 5th Station",
        "山中湖　旭日丘": "Yamanakako Asahigaoka",
        # Kofu / Yamanashi
        "甲府駅": "Kofu Station",
        "甲府駅南口": "Kofu Station South Exit",
        "石和温泉駅": "Isawa Onsen Station",
        # Suwa / Ina / Matsumoto
        "上諏訪駅": "Kamisuwa Station",
        "茅野駅": "Chino Station",
        "伊那バスターミナル": "Ina Bus Terminal",
        "飯田駅前": "Iida Station",
        "松本バスターミナル": "Matsumoto Bus Terminal",
        # Nagano / Hakuba / Kamikochi
        "長野駅東口": "Nagano Station East Exit",
        "白馬八方": "Hakuba Happo",
        "上高地バスターミナル": "Kamikochi Bus Terminal",
        "平湯温泉": "Hirayu Onsen",
        "高山濃飛バスセンター": "Takayama Nohi Bus Center",
        # Nagoya
        "名鉄バスセンター": "Meitetsu Bus Center",
        "名古屋駅新幹線口": "Nagoya Station Shinkansen Exit",
    }
)


class Translator:
    """Japanese-to-English display names with pass-through fallback.

    Unknown names are returned unchanged, so a missing entry never hides a
    station; it is simply shown in Japanese.
    """

    def __init__(
        self,
        route_names: Mapping[str, str] = ROUTE_NAMES,
        station_names: Mapping[str, str] = STATION_NAMES,
    ) -> None:
        self._routes = route_names
        self._stations = station_names

    def route_name(self, japanese: str) -> str:
        return self._routes.get(japanese, japanese)

    def station_name(self, japanese: str) -> str:
        return self._stations.get(japanese, japanese)


class PassThroughTranslator(Translator):
    """Translator that never rewrites a name."""

    def __init__(self) -> None:
        super().__init__(route_names={}, station_names={})
