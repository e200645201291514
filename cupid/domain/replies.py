"""Reply texts for the chat registration flow."""

NAME_PROMPT = "はじめまして！まずは名前を教えてね。"
NAME_TOO_LONG = "名前が長すぎます。{max_length}文字以内で入力してください。"
BIRTHDAY_PROMPT = "{name}さん、よろしくね。\n次に、誕生日を教えて（YYYY-MM-DD形式で入力してね）"
BIRTHDAY_FORMAT_ERROR = "誕生日はYYYY-MM-DD形式で入力してください。\n例: 2000-01-15"
REGISTRATION_COMPLETE = "登録完了！ありがとう。\n次は、好きな人を登録してね。"
CRUSH_PROMPT = "次は、好きな人を登録してね。"
ALREADY_REGISTERED = "もう登録完了しています。\n相思相愛が成立したらすぐにお知らせするね。"
